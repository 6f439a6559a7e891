"""KYC mixin: the current user's identity verification."""

from __future__ import annotations

from typing import Any, Protocol

from escrow_client.mixins._common import UploadFile, require_text
from escrow_client.models import KycInfo, KycSubmissionResult


class _KycClient(Protocol):
    async def _request(self, method: str, path: str, **kwargs: Any) -> Any: ...


class KycMixin:
    """Methods for /users/me/kyc."""

    async def get_my_kyc(self: _KycClient) -> KycInfo:
        """Get the logged-in user's KYC status."""
        response = await self._request("GET", "/users/me/kyc")
        return KycInfo.model_validate(response)

    async def submit_kyc(
        self: _KycClient,
        full_name: str,
        id_number: str,
        document_url: str | None = None,
        selfie_url: str | None = None,
        document: UploadFile | None = None,
        selfie: UploadFile | None = None,
    ) -> KycSubmissionResult:
        """Submit identity documents for review.

        The ID document and the selfie may each be given as a URL or as a
        file; files are sent as multipart fields ``document`` and ``selfie``.

        Raises:
            ValueError: If name or ID number is blank, or the document or
                selfie is missing.
        """
        fields: dict[str, str] = {
            "full_name": require_text(full_name, "Full name"),
            "id_number": require_text(id_number, "ID number"),
        }
        if document is None and not document_url:
            msg = "Document file or URL is required"
            raise ValueError(msg)
        if selfie is None and not selfie_url:
            msg = "Selfie file or URL is required"
            raise ValueError(msg)
        if document_url:
            fields["document_url"] = document_url
        if selfie_url:
            fields["selfie_url"] = selfie_url

        files: dict[str, UploadFile] = {}
        if document is not None:
            files["document"] = document
        if selfie is not None:
            files["selfie"] = selfie

        if files:
            response = await self._request("POST", "/users/me/kyc", data=fields, files=files)
        else:
            response = await self._request("POST", "/users/me/kyc", json=fields)
        return KycSubmissionResult.model_validate(response)

"""
Blob Storage Service
Uploads product images to Azure Blob Storage and signs read URLs

The container stays private: every stored URL carries a read-only SAS token
that expires after AZURE_SAS_TOKEN_EXPIRY_HOURS.
"""
import logging
import os
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from azure.core.exceptions import AzureError, ResourceExistsError
from azure.storage.blob import (
    BlobSasPermissions,
    BlobServiceClient,
    ContentSettings,
    generate_blob_sas,
)

from product_service.core.config import Settings
from product_service.core.exceptions import StorageNotConfiguredError, StorageUploadError

logger = logging.getLogger(__name__)

# Fallback extensions when the filename has none
CONTENT_TYPE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
}


class BlobStorageService:
    """
    Service for product image storage

    Handles:
    - Container creation on first upload
    - Unique blob naming per product
    - SAS URL generation
    """

    def __init__(self, settings: Settings, service_client: Optional[BlobServiceClient] = None):
        self.settings = settings
        self.account_name = settings.AZURE_STORAGE_ACCOUNT_NAME
        self.account_key = settings.AZURE_STORAGE_ACCOUNT_KEY
        self.container_name = settings.AZURE_STORAGE_CONTAINER_NAME
        self.sas_expiry_hours = settings.AZURE_SAS_TOKEN_EXPIRY_HOURS
        self._service_client = service_client
        self._container_ready = False

    @property
    def is_configured(self) -> bool:
        return self.settings.storage_configured

    @property
    def account_url(self) -> str:
        return f"https://{self.account_name}.blob.core.windows.net"

    def _get_service_client(self) -> BlobServiceClient:
        if not self.is_configured:
            raise StorageNotConfiguredError(
                "Azure Blob Storage not configured. Set AZURE_STORAGE_ACCOUNT_NAME, "
                "AZURE_STORAGE_ACCOUNT_KEY and AZURE_STORAGE_CONTAINER_NAME"
            )

        if self._service_client is None:
            self._service_client = BlobServiceClient(
                account_url=self.account_url,
                credential=self.account_key
            )
        return self._service_client

    def _ensure_container(self, service_client: BlobServiceClient):
        if self._container_ready:
            return

        container_client = service_client.get_container_client(self.container_name)
        try:
            container_client.create_container()
            logger.info(f"Created blob container '{self.container_name}'")
        except ResourceExistsError:
            pass

        self._container_ready = True

    @staticmethod
    def build_blob_name(product_id: int, filename: Optional[str], content_type: Optional[str]) -> str:
        """
        Blob name for a product image: product-<id>-<uuid>.<ext>

        The extension comes from the uploaded filename, falling back to the
        content type.
        """
        extension = ""
        if filename:
            extension = os.path.splitext(filename)[1].lstrip(".").lower()
        if not extension:
            extension = CONTENT_TYPE_EXTENSIONS.get(content_type or "", "bin")

        return f"product-{product_id}-{uuid.uuid4().hex}.{extension}"

    def generate_read_url(self, blob_name: str) -> str:
        """Signed, read-only URL for a blob"""
        expiry = datetime.now(timezone.utc) + timedelta(hours=self.sas_expiry_hours)
        sas_token = generate_blob_sas(
            account_name=self.account_name,
            container_name=self.container_name,
            blob_name=blob_name,
            account_key=self.account_key,
            permission=BlobSasPermissions(read=True),
            expiry=expiry
        )
        return f"{self.account_url}/{self.container_name}/{blob_name}?{sas_token}"

    def upload_product_image(
        self,
        product_id: int,
        data: bytes,
        filename: Optional[str] = None,
        content_type: Optional[str] = None
    ) -> str:
        """
        Upload an image and return its SAS URL

        Raises:
            StorageNotConfiguredError: credentials missing
            StorageUploadError: Azure rejected the upload
        """
        service_client = self._get_service_client()
        blob_name = self.build_blob_name(product_id, filename, content_type)

        try:
            self._ensure_container(service_client)
            blob_client = service_client.get_blob_client(
                container=self.container_name,
                blob=blob_name
            )
            blob_client.upload_blob(
                data,
                overwrite=True,
                content_settings=ContentSettings(content_type=content_type)
            )
        except AzureError as e:
            logger.error(f"Upload of {blob_name} failed: {e}")
            raise StorageUploadError(f"Failed to upload image: {e}") from e

        logger.info(f"Uploaded image for product {product_id} as {blob_name} ({len(data)} bytes)")
        return self.generate_read_url(blob_name)

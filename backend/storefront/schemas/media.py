"""
Storefront Edge API — Hero Image and QR Code Schemas
=====================================================
"""

from typing import Any, Dict

from pydantic import BaseModel


class HeroImageFields(BaseModel):
    """Form fields accompanying a hero image upload."""

    title: str = ""
    subtitle: str = ""
    description: str = ""
    display_order: int = 0
    show_content: bool = False

    def to_record(self, image_file_name: str, image_url: str) -> Dict[str, Any]:
        """Column dict for `hero_images`, including the schema-optional show_content."""
        return {
            "image_file_name": image_file_name,
            "image_url": image_url,
            "title": self.title,
            "subtitle": self.subtitle,
            "description": self.description,
            "display_order": self.display_order,
            "is_active": True,
            "show_content": self.show_content,
        }


class QRCodeCreate(BaseModel):
    """Body of POST /api/qr-codes."""

    name: str
    image_url: str
    is_active: bool = True

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump()


class UploadResult(BaseModel):
    """`{success, image, message}` returned by the image upload endpoints."""

    success: bool = True
    image: Dict[str, Any]
    message: str

"""Pillow-backed decoding of director signature images for the export renderers."""
from dataclasses import dataclass
from io import BytesIO
import logging

from PIL import Image, UnidentifiedImageError

from datravel.core.exceptions import AssetMissingError, ExtensionUnavailableError

logger = logging.getLogger(__name__)

# Signatures are small line art; anything larger is refused before decoding
MAX_SIGNATURE_PIXELS = 4096 * 4096


@dataclass
class SignatureImage:
    """Signature normalised to PNG, with its pixel size."""
    png_bytes: bytes
    width: int
    height: int

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height if self.height else 1.0


class PillowImageCodec:
    def load(self, data: bytes) -> SignatureImage:
        if not data:
            raise AssetMissingError("Signature file is empty.")

        try:
            image = Image.open(BytesIO(data))
            width, height = image.size
            if width * height > MAX_SIGNATURE_PIXELS:
                raise AssetMissingError(
                    f"Signature image is too large ({width}x{height} pixels)."
                )
            image.load()
        except Image.DecompressionBombError as e:
            raise AssetMissingError(f"Signature image is too large: {e}")
        except (UnidentifiedImageError, OSError, ValueError, SyntaxError, EOFError) as e:
            raise AssetMissingError(f"Signature image could not be read: {e}")

        if image.mode not in ("RGB", "RGBA", "L", "LA"):
            image = image.convert("RGBA")

        out = BytesIO()
        try:
            image.save(out, format="PNG")
        except OSError as e:
            # Pillow reports a missing zlib/PNG encoder as "encoder ... not available"
            if "not available" in str(e):
                raise ExtensionUnavailableError()
            raise AssetMissingError(f"Signature image could not be encoded: {e}")

        return SignatureImage(png_bytes=out.getvalue(), width=image.width, height=image.height)

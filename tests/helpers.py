from datetime import datetime
from io import BytesIO
import struct
import zlib

from PIL import Image

from datravel.core.deps import CurrentUser
from datravel.core.security import create_access_token
from datravel.models.account import Role

FIXED_NOW = datetime(2026, 3, 2, 9, 30, 0)


def as_user(account, role: Role) -> CurrentUser:
    return CurrentUser(id=account.id, role=role, is_active=account.is_active, account=account)


def auth_headers(account, role: Role) -> dict:
    return {"Authorization": f"Bearer {create_access_token(account.id, role.value)}"}


def png_bytes(size=(60, 20), color=(10, 10, 120)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def png_with_declared_size(width: int, height: int) -> bytes:
    """A tiny PNG whose header claims ``width`` x ``height`` pixels."""
    data = bytearray(png_bytes(size=(1, 1)))
    # IHDR data starts at byte 16; its CRC covers the chunk type and data (bytes 12-28)
    struct.pack_into(">II", data, 16, width, height)
    struct.pack_into(">I", data, 29, zlib.crc32(bytes(data[12:29])) & 0xFFFFFFFF)
    return bytes(data)

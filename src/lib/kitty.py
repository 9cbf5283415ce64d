"""
Kitty graphics protocol encoder

Turns PNG bytes into the escape sequence a Kitty-compatible terminal draws
as an image in the text flow:

    ESC _G a=T,f=100[,r=<rows>],m=1 ; <base64 chunk> ESC \\
    ESC _G m=1 ; <base64 chunk> ESC \\
    ...
    ESC _G m=0 ; <last chunk> ESC \\

The payload is split into chunks of at most 4096 base64 bytes; m=1 marks
that more chunks follow.
"""

import base64
import io
from typing import Dict

from PIL import Image, UnidentifiedImageError

from .errors import EncodeError
from .log import LOG


CHUNK_SIZE = 4096
APC_START = "\x1b_G"
ST = "\x1b\\"


def command_serialize(control: Dict[str, str], payload: bytes) -> str:
    """
    Serialize a graphics command with its payload into chunked escapes

    Only the first chunk carries the control keys; every chunk carries m.

    Args:
        control: Control keys, e.g. {"a": "T", "f": "100"}
        payload: Raw (not yet base64 encoded) payload bytes

    Returns:
        Escape sequence string
    """
    control_str = ",".join(f"{key}={value}" for key, value in control.items())
    data = base64.standard_b64encode(payload)

    chunks = []
    while data:
        chunk, data = data[:CHUNK_SIZE], data[CHUNK_SIZE:]
        more = 1 if data else 0
        header = f"m={more};" if chunks else f"{control_str},m={more};"
        chunks.append(APC_START + header + chunk.decode("ascii") + ST)
    return "".join(chunks)


def png_normalize(image: bytes) -> bytes:
    """
    Validate image bytes and return them as PNG

    PNG input is returned unchanged; any other format Pillow can decode is
    re-encoded as PNG.

    Raises:
        EncodeError: If the bytes are not a decodable image
    """
    if not image:
        raise EncodeError("empty image data")
    try:
        with Image.open(io.BytesIO(image)) as decoded:
            if decoded.format == "PNG":
                decoded.verify()
                return image
            buffer = io.BytesIO()
            decoded.save(buffer, format="PNG")
            return buffer.getvalue()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise EncodeError(f"Image could not be decoded: {e}") from e


class KittyEncoder:
    """Kitty implementation of the ImageEncoder interface"""

    def __init__(self, debug: bool = False) -> None:
        self.debug = debug

    def encode(self, image: bytes, display_mode: bool, target_rows: int) -> str:
        """
        Encode an image for inline display in the terminal

        Args:
            image: Image bytes (PNG preferred)
            display_mode: Display math ends with exactly one newline,
                          inline math has none
            target_rows: Rows to scale the image to; 0 selects 1 row for
                         inline math and auto-sizing for display math

        Returns:
            Kitty escape sequence string

        Raises:
            EncodeError: If the image cannot be decoded
        """
        png = png_normalize(image)

        control = {"a": "T", "f": "100"}
        if target_rows > 0:
            control["r"] = str(target_rows)
        elif not display_mode:
            control["r"] = "1"

        encoded = command_serialize(control, png)
        if self.debug:
            LOG(f"Kitty image: {len(png)} bytes, rows={control.get('r', 'auto')}, display={display_mode}", level=3)

        encoded = encoded.rstrip("\n")
        if display_mode:
            encoded += "\n"
        return encoded.replace("\x00", "")

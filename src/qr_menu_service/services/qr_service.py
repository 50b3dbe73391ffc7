"""QR code generation for public menu links."""

import re
from dataclasses import dataclass
from io import BytesIO

import qrcode
from PIL import Image, ImageDraw, ImageFont

DEFAULT_FOREGROUND = "#000000"
DEFAULT_BACKGROUND = "#ffffff"
DOWNLOAD_CAPTION = "Scan to get the complete menu"

QR_BORDER = 2
QR_BOX_SIZE = 10
QR_TARGET_SIZE = 300
CARD_PADDING = 24
CANVAS_PADDING = 40
TEXT_BLOCK_HEIGHT = 90

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


def is_valid_color(value: str) -> bool:
    return bool(_HEX_COLOR.match(value or ""))


def slugify(name: str) -> str:
    """Lowercase a menu name and collapse everything non-alphanumeric to single dashes."""
    slug = re.sub(r"[^a-z0-9]+", "-", (name or "").lower()).strip("-")
    return slug or "menu"


@dataclass
class SharePayload:
    title: str
    text: str
    url: str


class QRCodeService:
    """Renders QR codes pointing at the public menu page."""

    def __init__(self, public_base_url: str) -> None:
        """Initialize the QRCodeService.

        Args:
            public_base_url: Origin of the public site, e.g. https://menus.example.com
        """
        self.public_base_url = public_base_url.rstrip("/")

    def menu_url(self, menu_id: str) -> str:
        return f"{self.public_base_url}/menu/{menu_id}"

    def _make_image(self, data: str, foreground: str, background: str) -> Image.Image:
        if not is_valid_color(foreground) or not is_valid_color(background):
            raise ValueError("Colors must be hex values like #1a2b3c")

        qr = qrcode.QRCode(
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=QR_BOX_SIZE,
            border=QR_BORDER,
        )
        qr.add_data(data)
        qr.make(fit=True)

        image = qr.make_image(fill_color=foreground, back_color=background).get_image()
        image = image.convert("RGB")
        return image.resize((QR_TARGET_SIZE, QR_TARGET_SIZE), Image.Resampling.NEAREST)

    def render_png(
        self,
        menu_id: str,
        foreground: str = DEFAULT_FOREGROUND,
        background: str = DEFAULT_BACKGROUND,
    ) -> bytes:
        """Render the QR code for a menu's public URL as PNG bytes.

        Raises:
            ValueError: If a color is not a #rrggbb hex value
        """
        image = self._make_image(self.menu_url(menu_id), foreground, background)
        buffer = BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    def render_download(
        self,
        menu_id: str,
        menu_name: str,
        foreground: str = DEFAULT_FOREGROUND,
        background: str = DEFAULT_BACKGROUND,
    ) -> bytes:
        """Render the printable version: the code on a white card with the menu name and caption.

        Raises:
            ValueError: If a color is not a #rrggbb hex value
        """
        code = self._make_image(self.menu_url(menu_id), foreground, DEFAULT_BACKGROUND)

        card_width = QR_TARGET_SIZE + 2 * CARD_PADDING
        card_height = QR_TARGET_SIZE + 2 * CARD_PADDING + TEXT_BLOCK_HEIGHT
        canvas = Image.new(
            "RGB",
            (card_width + 2 * CANVAS_PADDING, card_height + 2 * CANVAS_PADDING),
            background,
        )

        draw = ImageDraw.Draw(canvas)
        card_box = (
            CANVAS_PADDING,
            CANVAS_PADDING,
            CANVAS_PADDING + card_width,
            CANVAS_PADDING + card_height,
        )
        draw.rectangle(card_box, fill=DEFAULT_BACKGROUND)
        canvas.paste(code, (CANVAS_PADDING + CARD_PADDING, CANVAS_PADDING + CARD_PADDING))

        font = ImageFont.load_default()
        text_top = CANVAS_PADDING + CARD_PADDING + QR_TARGET_SIZE + 16
        center_x = canvas.width // 2
        for offset, text, color in ((0, menu_name, "#111827"), (36, DOWNLOAD_CAPTION, "#4b5563")):
            width = draw.textlength(text, font=font)
            draw.text((center_x - width / 2, text_top + offset), text, fill=color, font=font)

        buffer = BytesIO()
        canvas.save(buffer, format="PNG")
        return buffer.getvalue()

    def download_filename(self, menu_name: str) -> str:
        return f"{slugify(menu_name)}-menu-qr.png"

    def share_payload(self, menu_id: str) -> SharePayload:
        return SharePayload(
            title="Menu QR Code",
            text="Scan this QR code to view our menu",
            url=self.menu_url(menu_id),
        )

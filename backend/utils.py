import uuid
from datetime import datetime, timezone
import qrcode
from io import BytesIO
import base64

import config

def generate_uuid() -> str:
    return str(uuid.uuid4())

def generate_organizer_token() -> str:
    """Generates the secret token that grants host access to a session."""
    return str(uuid.uuid4())

def get_utc_now() -> datetime:
    # Naive UTC, matching what the DateTime columns store
    return datetime.now(timezone.utc).replace(tzinfo=None)

def generate_qr_code_base64(data: str) -> str:
    """Generates a QR code and returns it as a base64 encoded string."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    
    buffered = BytesIO()
    img.save(buffered, format="PNG")
    img_str = base64.b64encode(buffered.getvalue()).decode("utf-8")
    return img_str

def get_frontend_url() -> str:
    """Base URL participants open to join, used for QR codes."""
    if config.FRONTEND_URL:
        return config.FRONTEND_URL.rstrip("/")
    # Fall back to the first configured CORS origin, then the dev server
    if config.CORS_ORIGINS:
        return config.CORS_ORIGINS[0].rstrip("/")
    return "http://localhost:5173"

def get_join_url(code: str) -> str:
    return f"{get_frontend_url()}/session/{code}"

from io import BytesIO
import qrcode
from qrcode import constants
from PIL import Image

from src.tickets.schemas import Ticket

DEFAULT_QR_SIZE = 240
DEFAULT_BORDER = 4

def ticket_qr_payload(ticket: Ticket) -> str:
    """QR payload: the ticket record as compact JSON"""
    return ticket.model_dump_json()

def generate_qr_png(ticket: Ticket, qr_size: int = DEFAULT_QR_SIZE, border: int = DEFAULT_BORDER) -> bytes:
    """Render the ticket's QR code as PNG bytes"""
    
    qr = qrcode.QRCode(
        version=None,
        error_correction=constants.ERROR_CORRECT_M,
        box_size=10,
        border=border,
    )
    
    qr.add_data(ticket_qr_payload(ticket))
    qr.make(fit=True)
    
    qr_image = qr.make_image(fill_color="black", back_color="white")
    
    # Resize image
    qr_image = qr_image.resize((qr_size, qr_size), Image.LANCZOS)
    
    buffer = BytesIO()
    qr_image.save(buffer, format="PNG")
    return buffer.getvalue()

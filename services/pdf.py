import unicodedata
from datetime import date, datetime

from fpdf import FPDF, FontFace
from fpdf.enums import XPos, YPos

# --- YOUR COMPANY INFO ---
COMPANY_INFO = {
    "name": "Focus Part",
    "subtitle": "Management Piese Auto",
    "file_prefix": "Focus_Part",
    "currency": "RON",
}

BRAND_RED = (220, 38, 38)
LEFT_MARGIN = 20
CONTENT_WIDTH = 170  # A4 width minus 20 mm on each side
LABEL_WIDTH = 45
COLUMN_WIDTHS = (15, 60, 50, 45)
FOOTER_HEIGHT = 25


def _pdf_text(value):
    """Fold text to Latin-1 for the core PDF fonts (diacritics are dropped)."""
    text = "" if value is None else str(value)
    try:
        text.encode("latin-1")
        return text
    except UnicodeEncodeError:
        decomposed = unicodedata.normalize("NFKD", text)
        stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
        return stripped.encode("latin-1", "replace").decode("latin-1")


def format_price(price):
    if price is None:
        return "N/A"
    return f"{price:.2f} {COMPANY_INFO['currency']}"


def parts_total(parts):
    """Sum of part prices; parts without a price count as 0."""
    return sum(part.price or 0.0 for part in parts)


def format_date(value):
    return value.strftime("%d.%m.%Y") if value else "N/A"


def format_timestamp(value):
    return value.strftime("%d.%m.%Y, %H:%M:%S")


def report_file_name(record, today=None):
    today = today or date.today()
    return f"{COMPANY_INFO['file_prefix']}_{record.vin_number}_{today.strftime('%Y-%m-%d')}.pdf"


class RecordReport(FPDF):
    def __init__(self, generated_at):
        super().__init__(orientation="P", unit="mm", format="A4")
        self.generated_at = generated_at
        self.set_margins(LEFT_MARGIN, 15, LEFT_MARGIN)
        self.set_auto_page_break(True, margin=FOOTER_HEIGHT)
        # PDF metadata dates must carry a timezone
        self.set_creation_date(generated_at if generated_at.tzinfo else generated_at.astimezone())

    def footer(self):
        self.set_draw_color(*BRAND_RED)
        self.set_line_width(0.5)
        self.line(LEFT_MARGIN, self.h - 20, LEFT_MARGIN + CONTENT_WIDTH, self.h - 20)
        self.set_y(-15)
        self.set_font("Helvetica", style="I", size=8)
        self.set_text_color(128, 128, 128)
        self.cell(0, 5, text=f"Generated on {format_timestamp(self.generated_at)}", align="C")
        self.set_text_color(0, 0, 0)

    def detail_line(self, label, value):
        self.set_font("Helvetica", style="B", size=11)
        self.cell(LABEL_WIDTH, 8, text=label)
        self.set_font("Helvetica", size=11)
        self.cell(0, 8, text=_pdf_text(value), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    def section_title(self, title, size=14):
        self.set_font("Helvetica", style="B", size=size)
        self.cell(0, 8, text=title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def generate_record_pdf(record, generated_at=None):
    """Render a record as a printable PDF and return its bytes."""
    generated_at = generated_at or datetime.now()
    pdf = RecordReport(generated_at)
    pdf.add_page()

    # --- COMPANY HEADER ---
    pdf.set_font("Helvetica", style="B", size=20)
    pdf.cell(0, 10, text=COMPANY_INFO["name"], align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font("Helvetica", size=12)
    pdf.cell(0, 6, text=COMPANY_INFO["subtitle"], align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_draw_color(*BRAND_RED)
    pdf.set_line_width(0.5)
    pdf.line(LEFT_MARGIN, pdf.get_y() + 2, LEFT_MARGIN + CONTENT_WIDTH, pdf.get_y() + 2)
    pdf.ln(10)

    # --- CLIENT DETAILS ---
    pdf.section_title("Detalii Client", size=16)
    pdf.ln(2)
    pdf.detail_line("Serie de Sasiu:", record.vin_number)
    pdf.detail_line("Numar Inmatriculare:", record.license_plate or "N/A")
    pdf.detail_line("Nume Client:", record.client_name)
    pdf.detail_line("Data Crearii:", format_date(record.created_at))
    pdf.ln(7)

    if record.notes:
        pdf.section_title("Notite")
        pdf.set_font("Helvetica", size=10)
        pdf.multi_cell(CONTENT_WIDTH, 5, text=_pdf_text(record.notes), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(8)

    # --- PARTS TABLE ---
    pdf.section_title("Piese Achizitionate")
    pdf.ln(2)
    pdf.set_font("Helvetica", size=10)
    heading_style = FontFace(emphasis="BOLD", color=255, fill_color=BRAND_RED)
    total_style = FontFace(emphasis="BOLD", color=0, fill_color=(240, 240, 240))

    with pdf.table(
        width=CONTENT_WIDTH,
        col_widths=COLUMN_WIDTHS,
        text_align=("CENTER", "LEFT", "LEFT", "RIGHT"),
        headings_style=heading_style,
        line_height=7,
        repeat_headings=1,
    ) as table:
        heading = table.row()
        for title in ("Nr.", "Nume Piesa", "Numar Serie", "Pret"):
            heading.cell(title, align="CENTER")

        for number, part in enumerate(record.parts, start=1):
            row = table.row()
            row.cell(str(number))
            row.cell(_pdf_text(part.name))
            row.cell(_pdf_text(part.serial_number or "N/A"))
            row.cell(format_price(part.price))

        total_row = table.row()
        total_row.cell("", style=total_style)
        total_row.cell("", style=total_style)
        total_row.cell("Total:", align="RIGHT", style=total_style)
        total_row.cell(format_price(parts_total(record.parts)), align="RIGHT", style=total_style)

    return bytes(pdf.output())

"""PDF rendering for the valuation report.

The report mirrors what the calculator page shows so the download handler, the
API and tests share one renderer. Text uses the core Helvetica font, so every
string goes through ``_latin1`` before it reaches the page.
"""

import logging
from datetime import date
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from fpdf import FPDF
from fpdf.enums import XPos, YPos
from PIL import Image, ImageOps

from frontend.ui.charts import estimate_assumption_rows, flexibility_breakdown_rows
from frontend.ui.metrics import payback_label
from services.valuation_core import (
    ParameterSet,
    ReferenceScaledFlexibility,
    ValuationConfig,
    ValuationResult,
)
from utils.flags import build_limitation_notes, stream_display_label
from utils.formatting import format_currency, format_number, format_percent

BRAND_DARK = (34, 36, 33)
BRAND_ACCENT = (212, 255, 0)
NOTE_FILL = (255, 243, 205)
FOOTER_TEXT = "Acron Energy System - Profitability calculator"

MARGIN = 15
PAGE_WIDTH = 210
USABLE_WIDTH = PAGE_WIDTH - 2 * MARGIN
HEADER_HEIGHT = 32
PAGE_BREAK_Y = 250


class _ReportPDF(FPDF):
    def footer(self) -> None:
        self.set_y(-12)
        self.set_font("Helvetica", "", 8)
        self.set_text_color(120, 120, 120)
        self.cell(USABLE_WIDTH / 2, 5, FOOTER_TEXT, align="L")
        self.cell(USABLE_WIDTH / 2, 5, f"Page {self.page_no()} of {{nb}}", align="R")
        self.set_text_color(0, 0, 0)


def _latin1(text: str) -> str:
    return text.replace("\u2212", "-").encode("latin-1", "replace").decode("latin-1")


def report_filename(params: ParameterSet, generated_on: Optional[date] = None) -> str:
    """Suggested download name, e.g. ``acron-profitability-250kW-2024-05-01.pdf``."""

    generated_on = generated_on or date.today()
    return f"acron-profitability-{params.battery_power_kw:.0f}kW-{generated_on:%Y-%m-%d}.pdf"


def _load_inverted_logo(logo_path: Optional[Union[str, Path]]) -> Optional[Image.Image]:
    """Return the logo with its colors inverted for the dark header, or ``None``."""

    if logo_path is None:
        return None
    try:
        with Image.open(logo_path) as img:
            rgba = img.convert("RGBA")
    except (OSError, ValueError) as exc:
        logging.getLogger(__name__).warning("Could not load report logo %s: %s", logo_path, exc)
        return None
    red, green, blue, alpha = rgba.split()
    inverted = ImageOps.invert(Image.merge("RGB", (red, green, blue)))
    inverted.putalpha(alpha)
    return inverted


def _draw_header(pdf: FPDF, logo: Optional[Image.Image], generated_on: date) -> None:
    pdf.set_fill_color(*BRAND_DARK)
    pdf.rect(0, 0, PAGE_WIDTH, HEADER_HEIGHT, style="F")

    if logo is not None:
        logo_height = 10.0
        logo_width = logo_height * logo.width / max(1, logo.height)
        pdf.image(logo, x=MARGIN, y=8, w=logo_width, h=logo_height)
    else:
        pdf.set_xy(MARGIN, 7)
        pdf.set_font("Helvetica", "B", 18)
        pdf.set_text_color(*BRAND_ACCENT)
        pdf.cell(40, 8, "ACRON", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_x(MARGIN)
        pdf.set_font("Helvetica", "", 9)
        pdf.set_text_color(255, 255, 255)
        pdf.cell(40, 5, "Energy System")

    pdf.set_xy(MARGIN, 21)
    pdf.set_font("Helvetica", "B", 13)
    pdf.set_text_color(255, 255, 255)
    pdf.cell(USABLE_WIDTH * 0.65, 7, "Profitability analysis - battery storage")
    pdf.set_font("Helvetica", "", 9)
    pdf.cell(USABLE_WIDTH * 0.35, 7, f"Generated {generated_on:%Y-%m-%d}", align="R")
    pdf.set_text_color(0, 0, 0)
    pdf.set_y(HEADER_HEIGHT + 6)


def _ensure_space(pdf: FPDF, needed: float) -> None:
    if pdf.get_y() + needed > PAGE_BREAK_Y:
        pdf.add_page()
        pdf.set_y(MARGIN)


def _draw_section_title(pdf: FPDF, title: str) -> None:
    _ensure_space(pdf, 20)
    pdf.set_font("Helvetica", "B", 12)
    pdf.set_text_color(20, 20, 20)
    pdf.cell(0, 7, _latin1(title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_draw_color(220, 223, 228)
    pdf.line(MARGIN, pdf.get_y(), MARGIN + USABLE_WIDTH, pdf.get_y())
    pdf.ln(2)


def _draw_table(
    pdf: FPDF,
    col_widths: Sequence[float],
    rows: Sequence[Sequence[str]],
    aligns: Optional[Sequence[str]] = None,
    footer_row: Optional[Sequence[str]] = None,
    font_size: int = 9,
) -> float:
    """Render a header row, body rows and an optional bold total; return the bottom y."""

    aligns = aligns or ["L"] * len(col_widths)
    row_height = 6

    def _row(cells: Sequence[str], fill: Tuple[int, int, int], text: Tuple[int, int, int], style: str) -> None:
        _ensure_space(pdf, row_height)
        pdf.set_x(MARGIN)
        pdf.set_font("Helvetica", style, font_size)
        pdf.set_fill_color(*fill)
        pdf.set_text_color(*text)
        for idx, cell in enumerate(cells):
            pdf.cell(
                col_widths[idx],
                row_height,
                _latin1(cell),
                border=1,
                align=aligns[idx],
                fill=True,
                new_x=XPos.RIGHT,
                new_y=YPos.TOP,
            )
        pdf.ln(row_height)

    pdf.set_draw_color(220, 223, 228)
    _row(rows[0], BRAND_DARK, BRAND_ACCENT, "B")
    for body in rows[1:]:
        _row(body, (255, 255, 255), (20, 20, 20), "")
    if footer_row is not None:
        _row(footer_row, (240, 240, 240), (20, 20, 20), "B")
    pdf.set_text_color(0, 0, 0)
    pdf.ln(4)
    return pdf.get_y()


def _draw_lines(pdf: FPDF, lines: List[str], font_size: int = 9) -> None:
    pdf.set_font("Helvetica", "", font_size)
    pdf.set_text_color(40, 40, 40)
    for line in lines:
        _ensure_space(pdf, 5)
        pdf.multi_cell(0, 5, _latin1(f"- {line}"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_text_color(0, 0, 0)
    pdf.ln(3)


def _draw_notes_box(pdf: FPDF, notes: List[str]) -> None:
    text = "\n".join(f"- {note}" for note in notes)
    line_height = 5
    estimated_height = line_height * (len(notes) * 2 + 2)
    _ensure_space(pdf, estimated_height)
    pdf.set_fill_color(*NOTE_FILL)
    pdf.set_draw_color(230, 200, 120)
    pdf.set_font("Helvetica", "B", 10)
    pdf.cell(0, 7, "Important limitations", border="LTR", fill=True, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font("Helvetica", "", 9)
    pdf.multi_cell(0, line_height, _latin1(text), border="LBR", fill=True, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(3)


def _configuration_rows(params: ParameterSet, config: ValuationConfig, locale: Optional[str]) -> List[List[str]]:
    rows = [["Parameter", "Value"], ["Battery power", f"{format_number(params.battery_power_kw, locale)} kW"]]
    if params.battery_capacity_kwh is not None:
        rows.append(["Battery capacity", f"{format_number(params.battery_capacity_kwh, locale)} kWh"])
    if not isinstance(config.flexibility_model, ReferenceScaledFlexibility):
        rows.extend(
            [
                ["Activation price", f"{format_number(params.activation_price_per_mwh, locale)} per MWh"],
                [
                    "Availability price winter",
                    f"{format_number(params.availability_price_per_mwh_per_hour, locale)} per MWh/h",
                ],
                ["Hours per day", format_number(params.hours_per_day, locale)],
                ["Activations per winter", format_number(params.activations_per_winter, locale)],
                ["Summer income", f"{format_number(params.summer_factor_pct, locale)}% of winter"],
            ]
        )
    if params.include_solar:
        rows.extend(
            [
                ["Solar capacity", f"{format_number(params.solar_capacity_kwp, locale)} kWp"],
                ["Solar production", f"{format_number(params.annual_solar_production_kwh, locale)} kWh/year"],
                ["Electricity price", f"{format_number(params.spot_price_per_kwh, locale, digits=2)} per kWh"],
                [
                    "Self-consumption without / with battery",
                    f"{format_number(params.self_consumption_without_battery_pct, locale)}%"
                    f" / {format_number(params.self_consumption_with_battery_pct, locale)}%",
                ],
            ]
        )
    rows.append(["Investment", format_number(params.investment_amount, locale)])
    return rows


def build_valuation_report(
    params: ParameterSet,
    result: ValuationResult,
    config: ValuationConfig,
    locale: Optional[str] = None,
    currency: str = "NOK",
    logo_path: Optional[Union[str, Path]] = None,
    generated_on: Optional[date] = None,
) -> bytes:
    """Render the profitability report for one evaluation and return the PDF bytes."""

    generated_on = generated_on or date.today()
    pdf = _ReportPDF(format="A4")
    pdf.alias_nb_pages()
    pdf.set_margins(MARGIN, MARGIN, MARGIN)
    pdf.set_auto_page_break(auto=True, margin=18)
    pdf.add_page()
    _draw_header(pdf, _load_inverted_logo(logo_path), generated_on)

    _draw_section_title(pdf, "System configuration")
    _draw_table(pdf, [USABLE_WIDTH * 0.55, USABLE_WIDTH * 0.45], _configuration_rows(params, config, locale))

    _draw_section_title(pdf, "Annual value creation")
    shares = result.stream_shares()
    stream_rows = [["Revenue stream", "Amount / year", "Share"]]
    for stream in result.streams():
        if not stream.included:
            continue
        share = format_percent(shares[stream.key], locale) if shares is not None else "-"
        stream_rows.append(
            [
                stream_display_label(stream.label, stream.key, result),
                format_currency(stream.value, locale, currency),
                share,
            ]
        )
    _draw_table(
        pdf,
        [USABLE_WIDTH * 0.5, USABLE_WIDTH * 0.3, USABLE_WIDTH * 0.2],
        stream_rows,
        aligns=["L", "R", "R"],
        footer_row=[
            "Total gross value",
            format_currency(result.gross_value, locale, currency),
            format_percent(1.0, locale) if shares is not None else "-",
        ],
    )

    _draw_section_title(pdf, "Key figures")
    roi_text = format_percent(result.roi, locale) if params.investment_amount > 0 else "Not applicable"
    _draw_table(
        pdf,
        [USABLE_WIDTH * 0.55, USABLE_WIDTH * 0.45],
        [
            ["Figure", "Value"],
            ["Gross value / year", format_currency(result.gross_value, locale, currency)],
            [f"Acron fee ({format_percent(config.fee_rate, locale)})", format_currency(result.acron_fee, locale, currency)],
            ["Net to building owner / year", format_currency(result.net_value, locale, currency)],
            ["Payback time", payback_label(result.payback_years, result.payback_status, locale)],
            ["Annual ROI", roi_text],
        ],
        aligns=["L", "R"],
    )

    _draw_section_title(pdf, "Flexibility market breakdown")
    breakdown = [["Item", "Amount"]] + [list(row) for row in flexibility_breakdown_rows(params, result, locale)]
    _draw_table(pdf, [USABLE_WIDTH * 0.7, USABLE_WIDTH * 0.3], breakdown, aligns=["L", "R"])

    _draw_section_title(pdf, "Calculation basis")
    basis_lines = [
        "Gross value is the sum of the included revenue streams.",
        f"The Acron fee is {format_percent(config.fee_rate, locale)} of the gross value.",
        "Payback time is the investment divided by the net annual value.",
        "ROI is the net annual value divided by the investment.",
    ]
    _draw_lines(pdf, basis_lines)

    _draw_section_title(pdf, "User-supplied values and estimates")
    _draw_lines(pdf, estimate_assumption_rows(params, config, locale))

    _draw_notes_box(pdf, build_limitation_notes(params, result))

    return bytes(pdf.output())

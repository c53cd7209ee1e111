"""Built-in backends for the three conversion kinds."""

from __future__ import annotations

import io
import logging
from collections.abc import Sequence
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Any, Protocol

from local_converter.application.results import ConversionResult, SourceFile
from local_converter.errors import DependencyError
from local_converter.schemas import AppSettings
from local_converter.types import FileType, VoiceGender

logger = logging.getLogger(__name__)

_PAGE_FORMATS = {"A4": "a4", "A3": "a3", "Letter": "letter"}
_ORIENTATIONS = {"portrait": "P", "landscape": "L"}
# Line height relative to font size, in mm per point.
_LINE_HEIGHT_FACTOR = 0.4

SPEECH_BASE_RATE_WPM = 200
_VOICE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "female": ("female", "feminina", "woman", "luciana", "fernanda"),
    "male": ("male", "masculino", "man", "felipe", "ricardo"),
}


def decode_text(data: bytes) -> str:
    """Decode uploaded text as UTF-8, replacing undecodable bytes."""
    return data.decode("utf-8", errors="replace")


class PdfDocumentBackend:
    """Lay out plain text as a PDF document using ``fpdf2``."""

    def convert(self, source: SourceFile, settings: AppSettings) -> ConversionResult:
        """Render ``source`` text with the page settings.

        Parameters
        ----------
        source : SourceFile
            Text file to render.
        settings : AppSettings
            Supplies page size, orientation, margin and font size.

        Returns
        -------
        ConversionResult
            ``<stem>.pdf`` with the PDF bytes.
        """
        try:
            from fpdf import FPDF
        except Exception as exc:
            raise DependencyError(
                "fpdf2 is required for document conversion. Install extra: .[document]"
            ) from exc

        # Core fonts only cover latin-1.
        text = decode_text(source.data).encode("latin-1", errors="replace").decode("latin-1")
        pdf = FPDF(
            orientation=_ORIENTATIONS[settings.orientation],
            unit="mm",
            format=_PAGE_FORMATS[settings.page_size],
        )
        margin = settings.margin_mm
        pdf.set_margins(margin, margin, margin)
        pdf.set_auto_page_break(auto=True, margin=margin)
        pdf.add_page()
        pdf.set_font("helvetica", size=settings.font_size)
        pdf.multi_cell(0, settings.font_size * _LINE_HEIGHT_FACTOR, text)
        blob = bytes(pdf.output())
        logger.info("document rendered: %d pages", pdf.page_no())
        return ConversionResult.ok(f"{source.stem}.pdf", FileType.DOCUMENT, blob)


class TesseractTextBackend:
    """Extract text from images with Tesseract."""

    def convert(self, source: SourceFile, settings: AppSettings) -> ConversionResult:
        file_name = f"{source.stem}_ocr.txt"
        try:
            import pytesseract
            from PIL import Image, ImageOps, UnidentifiedImageError
        except Exception as exc:
            raise DependencyError(
                "pytesseract and Pillow are required for text extraction. "
                "Install extra: .[ocr]"
            ) from exc

        try:
            with Image.open(io.BytesIO(source.data)) as image:
                prepared = image.convert("RGB")
                if settings.ocr_precise:
                    prepared = ImageOps.grayscale(prepared)
                    prepared = prepared.resize((prepared.width * 2, prepared.height * 2))
                text = pytesseract.image_to_string(prepared, lang=settings.ocr_language)
        except UnidentifiedImageError:
            return ConversionResult.failed(file_name, FileType.TEXT, "File is not a valid image")
        except pytesseract.TesseractNotFoundError as exc:
            raise DependencyError("The tesseract executable is not installed.") from exc
        except pytesseract.TesseractError as exc:
            return ConversionResult.failed(file_name, FileType.TEXT, f"OCR failed: {exc}")

        extracted = text.strip()
        if not extracted:
            return ConversionResult.failed(file_name, FileType.TEXT, "No text found in image")
        return ConversionResult.ok(file_name, FileType.TEXT, extracted.encode("utf-8"))


class _VoiceLike(Protocol):
    id: str
    name: str


def select_voice(voices: Sequence[Any], gender: VoiceGender) -> _VoiceLike | None:
    """Pick the first voice matching ``gender``, else the first voice.

    A voice matches when its ``gender`` attribute equals the requested gender
    or its name contains one of the gender keywords.
    """
    if not voices:
        return None
    keywords = _VOICE_KEYWORDS[gender]
    for voice in voices:
        declared = str(getattr(voice, "gender", "") or "").lower()
        if declared == gender:
            return voice
        name = str(getattr(voice, "name", "")).lower()
        # "female" contains "male"; only accept male keywords on whole words.
        words = set(name.replace("-", " ").replace("_", " ").split())
        if gender == "female" and any(keyword in name for keyword in keywords):
            return voice
        if gender == "male" and words & set(keywords):
            return voice
    return voices[0]


class Pyttsx3SpeechBackend:
    """Synthesize speech offline with ``pyttsx3``."""

    def convert(self, source: SourceFile, settings: AppSettings) -> ConversionResult:
        file_name = f"{source.stem}.mp3"
        text = decode_text(source.data).strip()
        if not text:
            return ConversionResult.failed(file_name, FileType.AUDIO, "Text is empty")
        try:
            import pyttsx3
        except Exception as exc:
            raise DependencyError(
                "pyttsx3 is required for speech conversion. Install extra: .[speech]"
            ) from exc

        engine = pyttsx3.init()
        try:
            engine.setProperty("rate", int(SPEECH_BASE_RATE_WPM * settings.speech_rate))
            voice = select_voice(engine.getProperty("voices") or [], settings.voice)
            if voice is not None:
                engine.setProperty("voice", voice.id)
            with TemporaryDirectory(prefix="local-converter-") as tmp:
                output_path = Path(tmp) / file_name
                engine.save_to_file(text, str(output_path))
                engine.runAndWait()
                if not output_path.exists() or output_path.stat().st_size == 0:
                    return ConversionResult.failed(
                        file_name, FileType.AUDIO, "Speech engine produced no audio"
                    )
                blob = output_path.read_bytes()
        finally:
            engine.stop()
        return ConversionResult.ok(file_name, FileType.AUDIO, blob)

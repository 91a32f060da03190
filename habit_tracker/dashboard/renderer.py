"""Dashboard and calendar image renderer."""

import io
import logging
from datetime import date
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from ..analytics.models import CalendarGrid, DayCell
from .service import TrackableCard

logger = logging.getLogger(__name__)

EMPTY_CELL = (235, 237, 240)
ACTIVE_CELL = (34, 197, 94)
MAX_SEGMENTS = 20


def _blend(color: tuple[int, int, int], amount: float) -> tuple[int, int, int]:
    """Mix `color` over white; amount 0 gives white, 1 gives the color."""
    return tuple(int(255 + (c - 255) * amount) for c in color)


class DashboardRenderer:
    """Renders habit dashboards and activity calendars to PNG."""

    def __init__(self, width: int = 800, height: int = 480):
        """
        Initialize renderer.

        Args:
            width: Dashboard image width
            height: Dashboard image height
        """
        self.width = width
        self.height = height

        # Try to load fonts, fall back to default
        self.fonts = self._load_fonts()

    def _load_fonts(self) -> dict:
        """Load fonts for rendering."""
        fonts = {}

        # Try to find system fonts
        font_paths = [
            "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
            "/System/Library/Fonts/Helvetica.ttc",  # macOS
        ]

        try:
            for path in font_paths:
                if Path(path).exists():
                    fonts["header"] = ImageFont.truetype(path, 24)
                    fonts["title"] = ImageFont.truetype(path, 20)
                    fonts["normal"] = ImageFont.truetype(path, 16)
                    fonts["small"] = ImageFont.truetype(path, 12)
                    logger.info(f"Loaded fonts from {path}")
                    break
        except OSError as e:
            logger.warning(f"Could not load TrueType fonts: {e}, using default")
            fonts = {}

        # Fall back to default fonts
        if not fonts:
            default_font = ImageFont.load_default()
            fonts["header"] = default_font
            fonts["title"] = default_font
            fonts["normal"] = default_font
            fonts["small"] = default_font

        return fonts

    def render_dashboard(self, cards: list[TrackableCard], today: date) -> bytes:
        """
        Render the dashboard.

        Args:
            cards: Ordered dashboard cards with stats and goal progress
            today: Date shown in the header

        Returns:
            PNG image bytes
        """
        logger.info(f"Rendering dashboard with {len(cards)} trackables")

        image = Image.new("RGB", (self.width, self.height), "white")
        draw = ImageDraw.Draw(image)

        self._draw_header(draw, today)
        self._draw_cards(draw, cards)
        self._draw_footer(draw, cards)

        return self._to_png(image)

    def _draw_header(self, draw: ImageDraw.ImageDraw, today: date):
        """Draw header with the current date."""
        draw.text((20, 15), "Habit Tracker", fill="black", font=self.fonts["header"])

        day_text = today.strftime("%A, %b %d, %Y")
        bbox = draw.textbbox((0, 0), day_text, font=self.fonts["normal"])
        text_width = bbox[2] - bbox[0]
        draw.text((self.width - text_width - 20, 18), day_text, fill="black", font=self.fonts["normal"])

        draw.line([20, 50, self.width - 20, 50], fill="black", width=2)

    def _draw_cards(self, draw: ImageDraw.ImageDraw, cards: list[TrackableCard]):
        """Draw all trackables, stopping when the image is full."""
        y_offset = 70

        for card in cards:
            if y_offset > self.height - 100:  # Leave room for footer
                break

            self._draw_card_row(draw, card, y_offset)
            y_offset += 85

    def _draw_card_row(self, draw: ImageDraw.ImageDraw, card: TrackableCard, y: int):
        """Draw a single trackable with streaks and goal progress."""
        x_margin = 30
        color = card.trackable.color

        draw.ellipse([x_margin, y + 4, x_margin + 14, y + 18], fill=color)
        name_text = card.trackable.name
        if card.checked_in_today:
            name_text += " (done today)"
        draw.text((x_margin + 24, y), name_text, fill="black", font=self.fonts["title"])

        streak_text = (
            f"Streak {card.stats.current_streak}  "
            f"Best {card.stats.longest_streak}  "
            f"30d {card.stats.completion_rate_30d}%"
        )
        bbox = draw.textbbox((0, 0), streak_text, font=self.fonts["small"])
        draw.text(
            (self.width - (bbox[2] - bbox[0]) - 30, y + 4),
            streak_text,
            fill="black",
            font=self.fonts["small"],
        )

        bar_y = y + 35
        bar_width = 400
        bar_height = 25

        if card.progress is None:
            draw.text((x_margin, bar_y), "No goal set", fill="gray", font=self.fonts["normal"])
            return

        self._draw_progress_bar(
            draw,
            x=x_margin,
            y=bar_y,
            width=bar_width,
            height=bar_height,
            fill_percent=card.progress.bar_width,
            segments=card.progress.target,
            color=color,
        )

        period = card.goal.target_period.value if card.goal else ""
        progress_text = f"{card.progress.current}/{card.progress.target} ({card.progress.percentage}%)"
        text_x = x_margin + bar_width + 20
        draw.text((text_x, bar_y - 5), progress_text, fill="black", font=self.fonts["normal"])
        draw.text((text_x, bar_y + 15), period, fill="black", font=self.fonts["small"])

    def _draw_progress_bar(
        self,
        draw: ImageDraw.ImageDraw,
        x: int,
        y: int,
        width: int,
        height: int,
        fill_percent: int,
        segments: int,
        color: str,
    ):
        """
        Draw progress bar filled to `fill_percent` (already clamped to 100).

        Small targets get one segment per completion.
        """
        filled_width = int(width * fill_percent / 100)

        if filled_width > 0:
            draw.rectangle([x, y, x + filled_width, y + height], fill=color, outline=color)

        draw.rectangle([x, y, x + width, y + height], outline="black", width=2)

        if 1 < segments <= MAX_SEGMENTS:
            segment_width = width / segments
            for i in range(1, segments):
                seg_x = x + int(i * segment_width)
                draw.line([seg_x, y, seg_x, y + height], fill="black", width=1)

    def _draw_footer(self, draw: ImageDraw.ImageDraw, cards: list[TrackableCard]):
        """Draw footer with summary stats."""
        y = self.height - 35

        draw.line([20, y - 10, self.width - 20, y - 10], fill="black", width=2)

        done_today = sum(1 for c in cards if c.checked_in_today)
        if cards:
            summary_text = f"Today: {done_today}/{len(cards)} done"
        else:
            summary_text = "No trackables yet"

        draw.text((20, y), summary_text, fill="black", font=self.fonts["normal"])

    def render_calendar(self, grid: CalendarGrid, cell: int = 12, gap: int = 3) -> bytes:
        """
        Render a calendar grid as a heatmap.

        Weeks are columns and Monday is the top row. Padding cells are left
        blank.

        Returns:
            PNG image bytes
        """
        left = 40
        top = 24
        step = cell + gap
        width = left + max(len(grid.weeks), 1) * step + 20
        height = top + 7 * step + 30

        image = Image.new("RGB", (width, height), "white")
        draw = ImageDraw.Draw(image)

        for label in grid.month_labels:
            draw.text((left + label.week_index * step, 4), label.month, fill="black", font=self.fonts["small"])

        for row, name in ((0, "Mon"), (2, "Wed"), (4, "Fri")):
            draw.text((4, top + row * step), name, fill="black", font=self.fonts["small"])

        for week_index, week in enumerate(grid.weeks):
            for day_index, day in enumerate(week):
                if day.is_padding:
                    continue
                x = left + week_index * step
                y = top + day_index * step
                draw.rectangle([x, y, x + cell, y + cell], fill=self._cell_color(day))

        summary = f"{grid.total_completions} completions"
        draw.text((left, top + 7 * step + 8), summary, fill="black", font=self.fonts["small"])

        logger.info(f"Rendered calendar with {len(grid.weeks)} weeks")
        return self._to_png(image)

    def _cell_color(self, day: DayCell) -> tuple[int, int, int]:
        if day.completions == 0:
            return EMPTY_CELL
        return _blend(ACTIVE_CELL, max(0.2, day.intensity))

    def _to_png(self, image: Image.Image) -> bytes:
        buffer = io.BytesIO()
        image.save(buffer, "PNG")
        return buffer.getvalue()

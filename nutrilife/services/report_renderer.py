import io
import re
from dataclasses import dataclass

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from nutrilife.models.schemas import Recipe, WeeklyPlan, WorkoutPlan

FONTS = {
    "normal": "Helvetica",
    "bold": "Helvetica-Bold",
    "italic": "Helvetica-Oblique",
}

MEAL_LABELS = [
    ("breakfast", "Breakfast"),
    ("morning_snack", "Morning Snack"),
    ("lunch", "Lunch"),
    ("afternoon_snack", "Afternoon Snack"),
    ("dinner", "Dinner"),
]


@dataclass
class Report:
    filename: str
    content: bytes
    pages: int


class ReportRenderer:
    """
    Lays text blocks out top to bottom on A4 pages.

    `y` is the cursor's distance from the top edge. When the next line would
    cross the bottom margin a new page is started and the cursor goes back to
    the top margin.
    """

    PAGE_WIDTH, PAGE_HEIGHT = A4
    MARGIN = 20 * mm
    CONTENT_WIDTH = 170 * mm

    def __init__(self, title: str = "NutriLife AI"):
        self._buffer = io.BytesIO()
        self.canvas = canvas.Canvas(self._buffer, pagesize=A4)
        self.canvas.setTitle(title)
        self.y = self.MARGIN
        self.pages = 1

    @property
    def bottom(self) -> float:
        return self.PAGE_HEIGHT - self.MARGIN

    def new_page(self) -> None:
        self.canvas.showPage()
        self.pages += 1
        self.y = self.MARGIN

    def check_page_break(self, height: float = 0) -> None:
        if self.y + height > self.bottom and self.y > self.MARGIN:
            self.new_page()

    def text(self, text: str, size: float = 11, style: str = "normal",
             indent: float = 0, line_height: float = 6 * mm) -> None:
        font = FONTS[style]
        width = self.CONTENT_WIDTH - indent
        lines = simpleSplit(text, font, size, width) or [""]

        # keep short blocks together; long ones flow across pages line by line
        self.check_page_break(min(len(lines) * line_height, self.bottom - self.MARGIN))
        for line in lines:
            self.check_page_break(line_height)
            # showPage() resets the font
            self.canvas.setFont(font, size)
            self.y += line_height
            self.canvas.drawString(self.MARGIN + indent, self.PAGE_HEIGHT - self.y, line)

    def space(self, height: float) -> None:
        self.y += height

    def rule(self, width: float = 0.5) -> None:
        self.check_page_break(4 * mm)
        self.y += 2 * mm
        self.canvas.setLineWidth(width)
        self.canvas.line(self.MARGIN, self.PAGE_HEIGHT - self.y,
                         self.MARGIN + self.CONTENT_WIDTH, self.PAGE_HEIGHT - self.y)
        self.y += 2 * mm

    def finish(self) -> bytes:
        self.canvas.save()
        return self._buffer.getvalue()


def _filename(name: str) -> str:
    """ASCII slug of `name`; it goes into a latin-1 encoded HTTP header."""
    slug = re.sub(r'\s+', '_', name.strip())
    slug = re.sub(r'[^\w\-]', '', slug, flags=re.ASCII).strip('_') or "report"
    return f"{slug}.pdf"


def _recipe_body(doc: ReportRenderer, recipe: Recipe, indent: float = 0, compact: bool = False) -> None:
    heading_size, body_size = (12, 10) if compact else (16, 11)
    body_line = 5 * mm if compact else 6 * mm

    doc.text("Ingredients", size=heading_size, style="bold", indent=indent, line_height=7 * mm)
    doc.space(2 * mm)
    for ingredient in recipe.ingredients:
        doc.text(f"- {ingredient}", size=body_size, indent=indent, line_height=body_line)
    doc.space(5 * mm)

    doc.text("Instructions", size=heading_size, style="bold", indent=indent, line_height=7 * mm)
    doc.space(2 * mm)
    for index, step in enumerate(recipe.instructions, start=1):
        doc.text(f"{index}. {step}", size=body_size, indent=indent, line_height=body_line)
        doc.space(2 * mm)


def recipe_report(recipe: Recipe) -> Report:
    doc = ReportRenderer(title=recipe.recipe_name)
    doc.text(recipe.recipe_name, size=22, style="bold", line_height=10 * mm)
    doc.space(3 * mm)
    doc.text(recipe.description, size=12, style="italic")
    doc.space(3 * mm)
    doc.text(f"Preparation time: {recipe.prep_time}", size=12)
    doc.rule()
    _recipe_body(doc, recipe)
    content = doc.finish()
    return Report(_filename(recipe.recipe_name), content, doc.pages)


def weekly_plan_report(plan: WeeklyPlan, profile_name: str) -> Report:
    doc = ReportRenderer(title=f"Nutrition plan for {profile_name}")
    doc.text(f"Complete Nutrition Plan for {profile_name}", size=22, style="bold", line_height=10 * mm)
    doc.space(6 * mm)

    day_items = list(plan.days.items())
    for index, (day, meals) in enumerate(day_items):
        doc.text(day, size=18, style="bold", line_height=8 * mm)
        doc.space(4 * mm)
        for slot, label in MEAL_LABELS:
            recipe: Recipe = getattr(meals, slot)
            doc.text(f"{label}: {recipe.recipe_name}", size=15, style="bold",
                     indent=5 * mm, line_height=7 * mm)
            doc.text(f"Time: {recipe.prep_time}", size=10, style="italic",
                     indent=5 * mm, line_height=6 * mm)
            doc.space(2 * mm)
            _recipe_body(doc, recipe, indent=10 * mm, compact=True)
            doc.space(4 * mm)
        if index < len(day_items) - 1:
            doc.rule(width=0.2)
            doc.space(4 * mm)

    content = doc.finish()
    return Report("complete_weekly_nutrition_plan.pdf", content, doc.pages)


def workout_plan_report(plan: WorkoutPlan) -> Report:
    doc = ReportRenderer(title=plan.plan_name)
    doc.text(plan.plan_name, size=22, style="bold", line_height=10 * mm)
    doc.text(f"{plan.focus} - {plan.duration}", size=14, style="italic", line_height=7 * mm)
    doc.rule()

    doc.text("Safety Recommendations", size=16, style="bold", line_height=8 * mm)
    doc.space(3 * mm)
    for recommendation in plan.recommendations:
        doc.text(f"- {recommendation}", size=11)
    doc.space(6 * mm)

    for day, workouts in plan.schedule.items():
        doc.text(day, size=18, style="bold", line_height=8 * mm)
        doc.space(4 * mm)
        for workout in workouts:
            doc.text(workout.name, size=14, style="bold", indent=5 * mm, line_height=7 * mm)
            doc.text(f"Sets: {workout.sets} | Reps: {workout.repetitions} | Rest: {workout.rest}",
                     size=10, indent=5 * mm, line_height=5 * mm)
            doc.space(2 * mm)
            doc.text(workout.description, size=11, indent=10 * mm)
            doc.space(5 * mm)

    content = doc.finish()
    return Report(_filename(plan.plan_name), content, doc.pages)

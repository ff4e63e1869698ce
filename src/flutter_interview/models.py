from typing import Literal

from pydantic import BaseModel, Field, computed_field

Severity = Literal["error", "warning"]


class Heading(BaseModel):
    depth: int = Field(ge=1, le=6)
    text: str
    line: int
    slug: str


class CodeFence(BaseModel):
    language: str
    open_line: int
    close_line: int | None = None

    @property
    def closed(self) -> bool:
        return self.close_line is not None


class Link(BaseModel):
    text: str
    target: str
    line: int
    is_image: bool = False

    @property
    def is_external(self) -> bool:
        return self.target.startswith(("http://", "https://"))

    @property
    def is_relative(self) -> bool:
        return not self.is_external and not self.target.startswith(("mailto:", "tel:"))


class Table(BaseModel):
    headers: list[str]
    rows: list[list[str]]
    line: int
    row_lines: list[int] = []


class MarkdownDocument(BaseModel):
    path: str
    lines: list[str]
    headings: list[Heading] = []
    fences: list[CodeFence] = []
    links: list[Link] = []
    tables: list[Table] = []

    def slugs(self) -> set[str]:
        return {h.slug for h in self.headings}


class TocEntry(BaseModel):
    number: int
    title: str
    anchor: str
    line: int


class Question(BaseModel):
    number: int
    title: str
    line: int
    slug: str
    section: str | None = None
    theory: str = ""
    code_languages: list[str] = []
    has_common_mistakes: bool = False
    has_follow_up: bool = False


class LevelDocument(BaseModel):
    level: str
    path: str
    title: str | None = None
    experience: str | None = None
    declared_range: tuple[int, int] | None = None
    sections: list[str] = []
    toc: list[TocEntry] = []
    questions: list[Question] = []
    document: MarkdownDocument

    @property
    def numbers(self) -> list[int]:
        return [q.number for q in self.questions]

    @property
    def question_range(self) -> tuple[int, int] | None:
        if not self.questions:
            return None
        return self.questions[0].number, self.questions[-1].number


class IndexRow(BaseModel):
    level: str
    target: str
    experience: str | None = None
    first: int | None = None
    last: int | None = None
    topics: str = ""
    line: int


class IndexDocument(BaseModel):
    path: str
    rows: list[IndexRow] = []
    document: MarkdownDocument


class Issue(BaseModel):
    rule: str
    severity: Severity
    path: str
    line: int | None = None
    message: str

    def location(self) -> str:
        return f"{self.path}:{self.line}" if self.line is not None else self.path


class CheckReport(BaseModel):
    issues: list[Issue] = []
    checked_files: list[str] = []
    rules: list[str] = []

    @computed_field  # type: ignore[prop-decorator]
    @property
    def errors(self) -> int:
        return sum(1 for i in self.issues if i.severity == "error")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def warnings(self) -> int:
        return sum(1 for i in self.issues if i.severity == "warning")

    def passed(self, strict: bool = False) -> bool:
        if strict:
            return not self.issues
        return self.errors == 0

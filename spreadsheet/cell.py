"""Sheet cells holding empty, text or formula content and tracking dependencies."""

from spreadsheet.common import CircularDependencyError
from spreadsheet.formula import parse_formula

FORMULA_SIGN = "="
ESCAPE_SIGN = "'"


class _EmptyContent:
    cache_valid = True

    def value(self):
        return ""

    def text(self):
        return ""

    def referenced_cells(self):
        return []

    def invalidate_cache(self):
        pass


class _TextContent(_EmptyContent):
    def __init__(self, text):
        self._text = text

    def value(self):
        if self._text.startswith(ESCAPE_SIGN):
            return self._text[1:]
        return self._text

    def text(self):
        return self._text


class _FormulaContent(_EmptyContent):
    def __init__(self, text, sheet):
        self._formula = parse_formula(text[1:])
        self._sheet = sheet
        self._cache = None

    @property
    def cache_valid(self):
        return self._cache is not None

    def value(self):
        if self._cache is None:
            self._cache = self._formula.evaluate(self._sheet)
        return self._cache

    def text(self):
        return FORMULA_SIGN + self._formula.expression()

    def referenced_cells(self):
        return self._formula.referenced_cells()

    def invalidate_cache(self):
        self._cache = None


class Cell:
    """One cell of a sheet."""

    def __init__(self, sheet):
        self._sheet = sheet
        self._content = _EmptyContent()
        self._dependents = set()
        self._references = set()

    def set(self, text):
        """Replace the content; raise on a malformed formula or a dependency cycle."""
        if not text:
            content = _EmptyContent()
        elif text[0] == FORMULA_SIGN:
            content = _FormulaContent(text, self._sheet)
        else:
            content = _TextContent(text)

        self._check_cycles(content)
        self._content = content
        self._update_dependencies()
        self._invalidate_cache()

    def clear(self):
        """Make the cell empty."""
        self.set("")

    def value(self):
        """The text shown, a number, or a FormulaError."""
        return self._content.value()

    def text(self):
        """The text as entered, with formulas in canonical form."""
        return self._content.text()

    def referenced_cells(self):
        """Positions the cell's formula refers to, sorted and distinct."""
        return self._content.referenced_cells()

    def is_referenced(self):
        """Whether any formula cell depends on this cell."""
        return bool(self._dependents)

    def _check_cycles(self, content):
        positions = content.referenced_cells()
        if not positions:
            return
        targets = {self._sheet.get_cell(pos) for pos in positions}
        targets.discard(None)

        visited = {self}
        pending = [self]
        while pending:
            current = pending.pop()
            if current in targets:
                raise CircularDependencyError("")
            for dependent in current._dependents:
                if dependent not in visited:
                    visited.add(dependent)
                    pending.append(dependent)

    def _update_dependencies(self):
        for cell in self._references:
            cell._dependents.discard(self)
        self._references = set()

        for pos in self._content.referenced_cells():
            cell = self._sheet.get_cell(pos)
            if cell is None:
                self._sheet.set_cell(pos, "")
                cell = self._sheet.get_cell(pos)
            self._references.add(cell)
            cell._dependents.add(self)

    def _invalidate_cache(self):
        self._content.invalidate_cache()
        pending = list(self._dependents)
        while pending:
            cell = pending.pop()
            if cell._content.cache_valid:
                cell._content.invalidate_cache()
                pending.extend(cell._dependents)
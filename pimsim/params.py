"""Reading of ``key = value`` parameter files."""

__all__ = [
    "ParameterReaderError",
    "ParameterReader",
    "parse_parameter_lines",
    "read_parameters",
]

_COMMENT = ";"
_EQUAL = "="


class ParameterReaderError(Exception):
    """Raised when a parameter file cannot be opened or parsed."""

    def __init__(self, message, line_number=0):
        self.line_number = line_number
        if line_number:
            message = f"{message}, line: {line_number}"
        super().__init__(message)


def _strip_newline(line):
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith("\n"):
        return line[:-1]
    return line


def parse_parameter_lines(lines, filename):
    """Parse lines of a parameter file into a list of ``(key, value)`` pairs."""
    params = []
    for line_number, raw in enumerate(lines):
        line = _strip_newline(raw)
        if not line:
            continue
        line = line.replace(" ", "").replace("\t", "")
        if line.startswith(_COMMENT):
            continue
        if line.count(_EQUAL) != 1:
            raise ParameterReaderError(f"{filename} has invalid parameter", line_number)

        eq = line.index(_EQUAL)
        key = line[:eq]
        comment = line.find(_COMMENT)
        if comment > eq:
            value = line[eq + 1 : comment]
        else:
            value = line[eq + 1 :]

        if not key or not value:
            raise ParameterReaderError("Cannot parse parameter", line_number)
        params.append((key, value))
    return params


class ParameterReader:
    """Reads a parameter file given at construction."""

    def __init__(self, filename):
        self.filename = str(filename)
        try:
            with open(self.filename, encoding="utf-8") as handle:
                self._lines = handle.readlines()
        except OSError as exc:
            raise ParameterReaderError(f"Failed to open {self.filename}") from exc

    def read(self):
        """Return the file's parameters as a list of ``(key, value)`` pairs."""
        return parse_parameter_lines(self._lines, self.filename)


def read_parameters(filename):
    """Read the parameters of ``filename``."""
    return ParameterReader(filename).read()
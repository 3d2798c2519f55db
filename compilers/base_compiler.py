import re
from abc import ABC, abstractmethod
from typing import Dict


class LatexCompileError(Exception):
    """LaTeX source did not produce a PDF. `log` holds the compiler output."""

    def __init__(self, message, log=''):
        super().__init__(message)
        self.log = log


class CompilerUnavailableError(Exception):
    pass


class BaseCompiler(ABC):
    """
    Abstract base class for LaTeX to PDF compilers.
    Each backend should inherit from this class and implement compile().
    """

    def __init__(self, config: Dict):
        """
        Initialize the compiler with configuration.

        Args:
            config: Configuration dictionary containing compiler settings
        """
        self.config = config
        self.timeout = config.get('latex_timeout', 60)
        self.name = self.get_name()

    @abstractmethod
    def get_name(self) -> str:
        """
        Return the name of the backend (e.g., 'local', 'remote').

        Returns:
            str: Backend name
        """
        pass

    @abstractmethod
    def compile(self, latex: str, filename: str) -> bytes:
        """
        Compile a LaTeX document.

        Args:
            latex: Complete LaTeX source
            filename: Base name for the job, without extension

        Returns:
            bytes: PDF content

        Raises:
            LatexCompileError: If no PDF was produced
        """
        pass


def build_pdf_filename(first_name, last_name, kind='resume'):
    """
    Download name for a generated PDF, e.g. "Ada-Lovelace-resume.pdf".

    Args:
        first_name: Candidate first name
        last_name: Candidate last name
        kind: "resume" or "cover-letter"

    Returns:
        str: Safe file name
    """
    safe = re.sub(r'[^a-zA-Z0-9-]', '', f"{first_name or ''}-{last_name or ''}")
    # "-" alone means both names were empty
    if not safe or safe == '-':
        return f"{kind}.pdf"
    return f"{safe}-{kind}.pdf"

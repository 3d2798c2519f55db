import logging
import os
import shutil
import subprocess
import tempfile

from .base_compiler import BaseCompiler, LatexCompileError

logger = logging.getLogger(__name__)


class LocalCompiler(BaseCompiler):
    """
    Runs pdflatex on this machine.
    """

    def get_name(self) -> str:
        return 'local'

    def compile(self, latex: str, filename: str) -> bytes:
        work_dir = tempfile.mkdtemp(prefix='jobkompass-latex-')
        tex_path = os.path.join(work_dir, f"{filename}.tex")
        pdf_path = os.path.join(work_dir, f"{filename}.pdf")
        log_path = os.path.join(work_dir, f"{filename}.log")
        try:
            with open(tex_path, 'w', encoding='utf-8') as f:
                f.write(latex)

            command = [
                self.config.get('pdflatex_path', 'pdflatex'),
                '-interaction=nonstopmode',
                '-output-directory', work_dir,
                tex_path,
            ]
            # Second pass resolves references
            for _ in range(2):
                try:
                    subprocess.run(command, cwd=work_dir, capture_output=True, timeout=self.timeout, check=False)
                except FileNotFoundError:
                    raise LatexCompileError("pdflatex not found", log=f"Executable not found: {command[0]}")
                except subprocess.TimeoutExpired:
                    raise LatexCompileError("LaTeX compilation timed out", log=self._read_log(log_path))

            if not os.path.exists(pdf_path):
                logger.error(f"pdflatex produced no PDF for {filename}")
                raise LatexCompileError("LaTeX compilation failed", log=self._read_log(log_path))

            with open(pdf_path, 'rb') as f:
                return f.read()
        finally:
            shutil.rmtree(work_dir, ignore_errors=True)

    @staticmethod
    def _read_log(log_path):
        if not os.path.exists(log_path):
            return ''
        with open(log_path, 'r', encoding='utf-8', errors='replace') as f:
            return f.read()

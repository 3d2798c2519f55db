import base64
import logging

import requests

from .base_compiler import BaseCompiler, LatexCompileError

logger = logging.getLogger(__name__)

MAX_LOG_CHARS = 2000


class RemoteCompiler(BaseCompiler):
    """
    Posts the document to the LaTeX microservice (POST {latex_service_url}/compile).
    """

    def get_name(self) -> str:
        return 'remote'

    def compile(self, latex: str, filename: str) -> bytes:
        url = f"{self.config['latex_service_url'].rstrip('/')}/compile"
        response = requests.post(url, json={'latex': latex, 'filename': filename}, timeout=self.timeout)

        if not response.ok:
            try:
                data = response.json()
            except ValueError:
                data = {}
            log = data.get('log') or ''
            logger.error(f"LaTeX service error: {response.status_code} - {data.get('error')}")
            raise LatexCompileError(
                data.get('error') or "LaTeX compilation failed",
                log=(log or response.reason or '')[:MAX_LOG_CHARS],
            )

        pdf_base64 = response.json().get('pdfBase64')
        if not pdf_base64:
            raise LatexCompileError("LaTeX service did not return a PDF")
        return base64.b64decode(pdf_base64)

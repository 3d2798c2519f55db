# Compilers package
from .base_compiler import BaseCompiler, CompilerUnavailableError, LatexCompileError, build_pdf_filename
from .local_compiler import LocalCompiler
from .remote_compiler import RemoteCompiler


def get_compiler(config):
    """
    Pick the compiler configured by `latex_compiler`.

    Args:
        config: Configuration dictionary

    Returns:
        BaseCompiler: RemoteCompiler for "remote", LocalCompiler otherwise

    Raises:
        CompilerUnavailableError: If the remote compiler has no service URL
    """
    if config.get('latex_compiler') == 'remote':
        if not config.get('latex_service_url'):
            raise CompilerUnavailableError("LaTeX service not configured")
        return RemoteCompiler(config)
    return LocalCompiler(config)


__all__ = [
    'BaseCompiler', 'LocalCompiler', 'RemoteCompiler', 'LatexCompileError', 'CompilerUnavailableError',
    'build_pdf_filename', 'get_compiler',
]

import argparse
import json
import logging
import sys

from compilers import CompilerUnavailableError, LatexCompileError, get_compiler
from generators import RESUME_TEMPLATE_IDS, generate_resume_latex
from services.db_schema_service import verify_db_schema
from services.free_resume_service import get_stats
from utils.config_utils import load_config


def render(args):
    """Render a resume JSON file to PDF (or .tex with --tex)"""
    config = load_config(args.config)
    print(f"[STEP 1/3] Loading resume content from {args.content}...", flush=True)
    with open(args.content, 'r', encoding='utf-8') as f:
        content = json.load(f)

    print(f"[STEP 2/3] Generating LaTeX with the {args.template} template...", flush=True)
    latex = generate_resume_latex(content, args.template)

    if args.tex:
        out = args.out if args.out.endswith('.tex') else args.out.rsplit('.', 1)[0] + '.tex'
        with open(out, 'w', encoding='utf-8') as f:
            f.write(latex)
        print(f"[OK] Wrote {out}", flush=True)
        return 0

    print(f"[STEP 3/3] Compiling PDF with the {config['latex_compiler']} compiler...", flush=True)
    try:
        pdf_bytes = get_compiler(config).compile(latex, 'resume')
    except CompilerUnavailableError as e:
        print(f"[ERROR] {e}", flush=True)
        return 1
    except LatexCompileError as e:
        print(f"[ERROR] {e}", flush=True)
        if e.log:
            print(e.log[-2000:], flush=True)
        return 1

    with open(args.out, 'wb') as f:
        f.write(pdf_bytes)
    print(f"[OK] Wrote {args.out} ({len(pdf_bytes)} bytes)", flush=True)
    return 0


def init_db(args):
    config = load_config(args.config)
    print(f"Verifying database schema in {config['db_path']}...", flush=True)
    verify_db_schema(config)
    print("[OK] Database schema verified", flush=True)
    return 0


def free_resume_stats(args):
    config = load_config(args.config)
    stats = get_stats(config)
    print("=" * 80)
    print("FREE RESUME GENERATOR STATS")
    print("=" * 80)
    for key, value in stats.items():
        print(f"  - {key.replace('_', ' ').capitalize()}: {value if value is not None else '-'}")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(description="JobKompass command line tools")
    subparsers = parser.add_subparsers(dest='command', required=True)

    render_parser = subparsers.add_parser('render', help="Render a resume JSON file")
    render_parser.add_argument('content', help="ResumeContent JSON file")
    render_parser.add_argument('--template', default='jake', choices=RESUME_TEMPLATE_IDS)
    render_parser.add_argument('--out', default='resume.pdf')
    render_parser.add_argument('--tex', action='store_true', help="Write the .tex source instead of compiling")
    render_parser.add_argument('--config', default='config.json')
    render_parser.set_defaults(func=render)

    init_parser = subparsers.add_parser('init-db', help="Create or migrate the database schema")
    init_parser.add_argument('config', nargs='?', default='config.json')
    init_parser.set_defaults(func=init_db)

    stats_parser = subparsers.add_parser('free-resume-stats', help="Print free resume generator usage")
    stats_parser.add_argument('config', nargs='?', default='config.json')
    stats_parser.set_defaults(func=free_resume_stats)
    return parser


def main(argv=None):
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

import os
import sys
import json
import argparse
import itertools
import logging

from tqdm import tqdm

from classifier import analyze, STRATEGIES, DEFAULT_STRATEGY
from models import Verdict
from preprocessor import (
    crawl_directory,
    load_submission,
    read_source,
    validate_source,
    MAX_SOURCE_BYTES,
    SOURCE_EXTENSIONS,
)
from reporter import generate_html_report, render_summary, render_trace
from structure_tree import build_tree, render
from tokenizer import tokenize

EXIT_OK = 0
EXIT_PLAGIARIZED = 1
EXIT_USAGE = 2


def scan_directory(root_path, threshold=0, output_file=None, strategy=DEFAULT_STRATEGY,
                   extensions=None, max_bytes=MAX_SOURCE_BYTES, title="CodeGuard"):
    """
    Compare every pair of submissions under root_path.

    Args:
        root_path (str): Directory whose first-level folders are submissions
        threshold (int): Minimum overall score for a pair to be listed
        output_file (str, optional): HTML report path; no report when None
        strategy (str): Scoring strategy name
        extensions (list, optional): Source file extensions to collect
        max_bytes (int): Size cap per submission

    Returns:
        (results, anomalies)
    """
    print("Step 1: Crawling and loading submissions...")
    submissions = crawl_directory(root_path, extensions)
    sources = {}
    anomalies = []

    for submitter, files in submissions.items():
        if not files['source']:
            exts = sorted(set(os.path.splitext(f)[1] or '(none)' for f in files['all_files']))
            anomalies.append({'submitter': submitter, 'anomalies': [{
                'code': 'NO_SOURCE',
                'severity': 'error',
                'message': f"No source files found (saw {', '.join(exts)})",
            }]})
            continue

        content, errors = load_submission(files['source'], max_bytes)
        for error in errors:
            print(f"  {submitter}: {error}")

        if errors and not content:
            found = [{'code': 'LOAD_FAILED', 'severity': 'error', 'message': errors[-1]}]
        else:
            found = validate_source(content, max_bytes)
        if found:
            anomalies.append({'submitter': submitter, 'anomalies': found})
        if any(a['severity'] == 'error' for a in found):
            continue
        sources[submitter] = content

    print("Step 2: Pairwise comparison...")
    pairs = list(itertools.combinations(sorted(sources), 2))
    results = []

    for submitter1, submitter2 in tqdm(pairs, desc="Comparing pairs", unit="pair"):
        report = analyze(sources[submitter1], sources[submitter2], strategy)
        if report.overall_score < threshold:
            continue
        results.append({
            'submitter1': submitter1,
            'submitter2': submitter2,
            'report': report,
            'source1': sources[submitter1],
            'source2': sources[submitter2],
        })

    results.sort(key=lambda r: r['report'].overall_score, reverse=True)

    if output_file:
        path = generate_html_report(results, output_file, threshold, anomalies, title)
        print(f"Report written to {path}")

    return results, anomalies


def _read_or_exit(path, max_bytes):
    content, error = read_source(path, max_bytes)
    if error:
        print(error, file=sys.stderr)
        sys.exit(EXIT_USAGE)
    return content


def cmd_compare(args):
    text_a = _read_or_exit(args.file_a, args.max_bytes)
    text_b = _read_or_exit(args.file_b, args.max_bytes)

    report = analyze(text_a, text_b, args.strategy)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(render_summary(report))
        print()
        print(report.explanation)

    if args.trace or args.tree:
        tokens = tokenize(text_a)
        if args.trace:
            print()
            print(render_trace(tokens))
        if args.tree:
            print()
            print(render(build_tree(tokens)))

    if args.fail_on_plagiarism and report.verdict is Verdict.PLAGIARIZED:
        return EXIT_PLAGIARIZED
    return EXIT_OK


def cmd_scan(args):
    if not os.path.isdir(args.root):
        print(f"Not a directory: {args.root}", file=sys.stderr)
        return EXIT_USAGE

    results, anomalies = scan_directory(
        args.root,
        threshold=args.threshold,
        output_file=args.output,
        strategy=args.strategy,
        extensions=args.extensions,
        max_bytes=args.max_bytes,
        title=args.title,
    )

    if args.json:
        payload = {
            'pairs': [
                {'submitter1': r['submitter1'], 'submitter2': r['submitter2'],
                 'report': r['report'].to_dict()}
                for r in results
            ],
            'anomalies': anomalies,
        }
        with open(args.json, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)

    print(f"\nListed {len(results)} pairs.")
    for res in results[:5]:
        report = res['report']
        print(f"{res['submitter1']} vs {res['submitter2']}: {report.overall_score}% {report.verdict.value}")
    return EXIT_OK


def build_parser():
    parser = argparse.ArgumentParser(
        prog="codeguard",
        description="Heuristic source code similarity checker.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--strategy", choices=sorted(STRATEGIES), default=DEFAULT_STRATEGY)
    parser.add_argument("--max-bytes", type=int, default=MAX_SOURCE_BYTES,
                        help="Refuse inputs larger than this many bytes")
    sub = parser.add_subparsers(dest="command", required=True)

    compare = sub.add_parser("compare", help="Compare two source files")
    compare.add_argument("file_a")
    compare.add_argument("file_b")
    compare.add_argument("--json", action="store_true", help="Print the report as JSON")
    compare.add_argument("--trace", action="store_true", help="Print the token trace of file A")
    compare.add_argument("--tree", action="store_true", help="Print the block outline of file A")
    compare.add_argument("--fail-on-plagiarism", action="store_true",
                         help="Exit with status 1 when the verdict is PLAGIARIZED")
    compare.set_defaults(func=cmd_compare)

    scan = sub.add_parser("scan", help="Compare every pair of submissions in a directory")
    scan.add_argument("root")
    scan.add_argument("--threshold", type=int, default=0,
                      help="Only list pairs with an overall score at or above this")
    scan.add_argument("--output", default=os.path.join("reports", "similarity_report.html"))
    scan.add_argument("--json", metavar="PATH", help="Also write results as JSON")
    scan.add_argument("--extensions", nargs="+", default=SOURCE_EXTENSIONS)
    scan.add_argument("--title", default="CodeGuard")
    scan.set_defaults(func=cmd_scan)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

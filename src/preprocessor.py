"""Submission loading and sanity checks for batch scans."""
import logging
import os

from tokenizer import tokenize

logger = logging.getLogger(__name__)

SOURCE_EXTENSIONS = ['.js', '.jsx', '.ts', '.tsx', '.mjs', '.c', '.h', '.cpp', '.cc', '.java', '.cs', '.go']

MAX_SOURCE_BYTES = 1024 * 1024
MIN_TOKENS = 10
MAX_COMMENT_RATIO = 0.8


def crawl_directory(root_path, extensions=None):
    """
    Recursively finds source files in the directory.
    Returns a dictionary where keys are submitter IDs (first-level folder
    names) and values hold the source file paths plus every file seen.
    Loose files directly under root_path count as their own submitter.
    """
    extensions = [e.lower() for e in (extensions or SOURCE_EXTENSIONS)]
    submissions = {}

    for root, dirs, files in os.walk(root_path):
        dirs.sort()
        rel_path = os.path.relpath(root, root_path)

        for file in sorted(files):
            full_path = os.path.join(root, file)
            ext = os.path.splitext(file)[1].lower()

            if rel_path == '.':
                submitter = file
            else:
                submitter = rel_path.split(os.sep)[0]

            entry = submissions.setdefault(submitter, {'source': [], 'all_files': []})
            entry['all_files'].append(full_path)
            if ext in extensions:
                entry['source'].append(full_path)

    return submissions


def read_source(path, max_bytes=MAX_SOURCE_BYTES):
    """
    Read one file as text.
    Returns: (content, error). Content is None when the file could not be
    read or is larger than max_bytes.
    """
    try:
        size = os.path.getsize(path)
        if size > max_bytes:
            return None, f"{os.path.basename(path)} is {size} bytes (limit {max_bytes})"
        with open(path, 'r', encoding='utf-8', errors='ignore') as f:
            return f.read(), None
    except OSError as e:
        return None, f"Error reading {path}: {e}"


def load_submission(paths, max_bytes=MAX_SOURCE_BYTES):
    """
    Concatenate the files of one submitter.
    Each file is introduced by a `// --- name ---` line, which the tokenizer
    drops as a comment.
    Returns: (content, errors)
    """
    parts = []
    errors = []
    total = 0

    for path in paths:
        content, error = read_source(path, max_bytes)
        if error:
            logger.debug("Skipping %s: %s", path, error)
            errors.append(error)
            continue
        total += len(content.encode('utf-8'))
        parts.append(f"// --- {os.path.basename(path)} ---\n{content}\n")

    if total > max_bytes:
        errors.append(f"Submission is {total} bytes (limit {max_bytes})")
        return "", errors

    return '\n'.join(parts).strip(), errors


def validate_source(content, max_bytes=MAX_SOURCE_BYTES):
    """
    Checks whether a submission is worth comparing.
    Returns: list of anomalies
    """
    anomalies = []

    if not content or not content.strip():
        anomalies.append({
            'code': 'EMPTY_FILE',
            'severity': 'error',
            'message': 'Source is empty'
        })
        return anomalies

    size = len(content.encode('utf-8'))
    if size > max_bytes:
        anomalies.append({
            'code': 'TOO_LARGE',
            'severity': 'error',
            'message': f'Source too large ({size} bytes, limit {max_bytes})',
            'details': {'size': size, 'limit': max_bytes}
        })
        return anomalies

    token_count = len(tokenize(content))
    if token_count < MIN_TOKENS:
        anomalies.append({
            'code': 'FEW_TOKENS',
            'severity': 'warning',
            'message': f'Too few tokens ({token_count})',
            'details': {'count': token_count}
        })

    lines = [line.strip() for line in content.splitlines() if line.strip()]
    comment_lines = 0
    in_block = False
    for line in lines:
        if in_block:
            comment_lines += 1
            if '*/' in line:
                in_block = False
        elif line.startswith('//'):
            comment_lines += 1
        elif line.startswith('/*'):
            comment_lines += 1
            in_block = '*/' not in line

    if lines:
        comment_ratio = comment_lines / len(lines)
        if comment_ratio > MAX_COMMENT_RATIO:
            anomalies.append({
                'code': 'HIGH_COMMENT_RATIO',
                'severity': 'warning',
                'message': f'Comment ratio too high ({comment_ratio*100:.1f}%)',
                'details': {'ratio': comment_ratio}
            })

    return anomalies

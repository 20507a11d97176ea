"""Text and HTML renderers for analysis results."""
import os
import html
import json

from models import Verdict
from tokenizer import TokenKind

VERDICT_STYLES = {
    Verdict.PLAGIARIZED: ('#e74c3c', '🔴'),
    Verdict.SIMILAR: ('#f39c12', '🟡'),
    Verdict.ORIGINAL: ('#27ae60', '🟢'),
}


def render_trace(tokens):
    """
    Token and skeleton trace of one input, as plain text.
    """
    lines = [f"TOKENS: {len(tokens)}"]
    lines.extend(f"  {t.kind.value:<12} {t.value}" for t in tokens)

    markers = [t for t in tokens if t.kind in (TokenKind.KEYWORD, TokenKind.PUNCTUATION)]
    lines.append(f"MARKERS: {len(markers)}")
    lines.append('  ' + ''.join(
        t.value + ' ' if t.kind is TokenKind.KEYWORD else t.value
        for t in markers
    ).strip())
    return '\n'.join(lines)


def render_summary(report):
    """Short score table printed above the explanation."""
    lines = [
        f"Verdict: {report.verdict.value} ({report.overall_score}%)  [strategy: {report.strategy}]",
    ]
    for label, phase in report.phases():
        lines.append(f"  {label:<13} {phase.score:>3}%  {phase.details}")
    if report.matches:
        lines.append(f"Shared lines: {len(report.matches)}")
        for match in report.matches[:10]:
            lines.append(f"  A:{match.line_a:<5} B:{match.line_b:<5} {match.content}")
    return '\n'.join(lines)


def generate_html_report(results, output_file, threshold=0, anomalies=None, title="CodeGuard"):
    """
    Generates an HTML report from pairwise scan results.

    Args:
        results: list of dicts with 'submitter1', 'submitter2', 'report',
                 'source1' and 'source2' keys, already sorted
        output_file: path of the HTML file to write
        threshold: minimum overall score that was listed
        anomalies: list of {'submitter', 'anomalies'} dicts for skipped or
                   suspicious submissions
    Returns:
        The path written.
    """
    anomalies = anomalies or []
    os.makedirs(os.path.dirname(os.path.abspath(output_file)), exist_ok=True)

    counts = {v: 0 for v in Verdict}
    for res in results:
        counts[res['report'].verdict] += 1

    html_content = """
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
        <title>{title} - Similarity Report</title>
        <style>
            body {{ font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; margin: 0; padding: 20px; background-color: #f4f4f9; color: #333; }}
            h1 {{ text-align: center; color: #2c3e50; }}
            .container {{ max-width: 1200px; margin: 0 auto; background: white; padding: 20px; border-radius: 8px; box-shadow: 0 2px 10px rgba(0,0,0,0.1); }}
            table {{ width: 100%; border-collapse: collapse; margin-top: 20px; }}
            th, td {{ padding: 12px; text-align: left; border-bottom: 1px solid #ddd; white-space: nowrap; }}
            th {{ background-color: #3498db; color: white; }}
            tr:hover {{ background-color: #f1f1f1; cursor: pointer; }}
            .filter-info {{ background-color: #e8f4f8; padding: 10px; border-radius: 4px; margin-bottom: 15px; border: 1px solid #bde0fe; color: #2c3e50; }}
            .anomaly-section {{ margin: 20px 0; padding: 15px; background: #fffbea; border-left: 4px solid #f39c12; border-radius: 4px; }}
            .modal {{ display: none; position: fixed; z-index: 1; left: 0; top: 0; width: 100%; height: 100%; overflow: auto; background-color: rgba(0,0,0,0.4); }}
            .modal-content {{ background-color: #fefefe; margin: 2% auto; padding: 20px; border: 1px solid #888; width: 85%; height: 90%; border-radius: 8px; display: flex; flex-direction: column; }}
            .close {{ color: #aaa; font-size: 28px; font-weight: bold; cursor: pointer; }}
            .comparison-view {{ display: flex; flex: 1; gap: 20px; overflow: hidden; }}
            .code-block {{ flex: 1; display: flex; flex-direction: column; overflow: hidden; border: 1px solid #ddd; border-radius: 4px; }}
            .code-block h3 {{ margin: 10px; background: #eee; padding: 5px; border-radius: 4px; }}
            pre {{ margin: 0; padding: 10px; font-family: 'Consolas', 'Monaco', monospace; font-size: 14px; line-height: 1.5; overflow: auto; flex: 1; background: #f8f8f8; }}
            .explanation {{ background: #e8f6f3; padding: 15px; border-left: 5px solid #1abc9c; margin-bottom: 15px; max-height: 200px; overflow-y: auto; white-space: pre-wrap; }}
        </style>
    </head>
    <body>
        <div class="container">
            <h1>{title} - Similarity Report</h1>
            <div class="filter-info">
                <strong>Listed:</strong> overall score &gt;= {threshold} |
                <strong>Pairs:</strong> {total_pairs} |
                <strong>PLAGIARIZED:</strong> {plagiarized} |
                <strong>SIMILAR:</strong> {similar} |
                <strong>ORIGINAL:</strong> {original}
            </div>
    """.format(
        title=html.escape(title),
        threshold=threshold,
        total_pairs=len(results),
        plagiarized=counts[Verdict.PLAGIARIZED],
        similar=counts[Verdict.SIMILAR],
        original=counts[Verdict.ORIGINAL],
    )

    if anomalies:
        html_content += f"""
            <div class="anomaly-section">
                <h3 style="margin-top: 0; color: #d68910;">⚠️ Submission warnings ({len(anomalies)})</h3>
                <ul>
        """
        for entry in anomalies:
            messages = '; '.join(a['message'] for a in entry['anomalies'])
            html_content += f"""
                    <li><strong>{html.escape(entry['submitter'])}</strong>: {html.escape(messages)}</li>
            """
        html_content += """
                </ul>
            </div>
        """

    html_content += """
            <table>
                <thead>
                    <tr>
                        <th>Rank</th>
                        <th>Submission 1</th>
                        <th>Submission 2</th>
                        <th>Overall</th>
                        <th>Lexical</th>
                        <th>Structural</th>
                        <th>Control Flow</th>
                        <th>Verdict</th>
                    </tr>
                </thead>
                <tbody>
    """

    for i, res in enumerate(results):
        report = res['report']
        color, icon = VERDICT_STYLES[report.verdict]
        s1 = html.escape(res['submitter1'])
        s2 = html.escape(res['submitter2'])

        html_content += f"""
            <tr onclick="openModal('{i}')">
                <td>{i+1}</td>
                <td>{s1}</td>
                <td>{s2}</td>
                <td><strong>{report.overall_score}%</strong></td>
                <td>{report.lexical.score}%</td>
                <td>{report.structural.score}%</td>
                <td>{report.control_flow.score}%</td>
                <td><span style="color: {color}; font-weight: bold;">{icon} {report.verdict.value}</span></td>
            </tr>

            <!-- Hidden data for modal -->
            <div id="data-{i}" style="display:none;">
                <div class="student1">{s1}</div>
                <div class="student2">{s2}</div>
                <div class="code1">{html.escape(res.get('source1', ''))}</div>
                <div class="code2">{html.escape(res.get('source2', ''))}</div>
                <div class="explanation-text">{html.escape(report.explanation)}</div>
                <div class="report-json">{html.escape(json.dumps(report.to_dict()))}</div>
            </div>
        """

    html_content += r"""
                </tbody>
            </table>
        </div>

        <!-- Modal -->
        <div id="myModal" class="modal">
            <div class="modal-content">
                <div style="display: flex; justify-content: space-between; align-items: center; margin-bottom: 15px;">
                    <h2 id="modal-title" style="margin: 0;">Comparison</h2>
                    <span class="close" onclick="closeModal()">&times;</span>
                </div>
                <div id="explanation" class="explanation"></div>
                <div class="comparison-view">
                    <div class="code-block">
                        <h3 id="s1-name">Submission 1</h3>
                        <pre id="code1-view"></pre>
                    </div>
                    <div class="code-block">
                        <h3 id="s2-name">Submission 2</h3>
                        <pre id="code2-view"></pre>
                    </div>
                </div>
            </div>
        </div>

        <script>
            function openModal(id) {
                var data = document.getElementById('data-' + id);
                var s1 = data.querySelector('.student1').textContent;
                var s2 = data.querySelector('.student2').textContent;
                document.getElementById('modal-title').textContent = s1 + ' vs ' + s2;
                document.getElementById('s1-name').textContent = s1;
                document.getElementById('s2-name').textContent = s2;
                document.getElementById('code1-view').textContent = data.querySelector('.code1').textContent;
                document.getElementById('code2-view').textContent = data.querySelector('.code2').textContent;
                document.getElementById('explanation').textContent = data.querySelector('.explanation-text').textContent;
                document.getElementById('myModal').style.display = 'block';
            }
            function closeModal() {
                document.getElementById('myModal').style.display = 'none';
            }
            window.onclick = function(event) {
                var modal = document.getElementById('myModal');
                if (event.target == modal) {
                    modal.style.display = 'none';
                }
            }
        </script>
    </body>
    </html>
    """

    with open(output_file, 'w', encoding='utf-8') as f:
        f.write(html_content)

    return output_file

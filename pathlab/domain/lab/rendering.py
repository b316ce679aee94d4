from html import escape
from pathlib import Path
from typing import Optional

from pathlab.core.config import settings
from pathlab.domain.lab.models import Report

_STYLE = """
body { font-family: Arial, sans-serif; padding: 40px; max-width: 800px; margin: 0 auto; }
h1 { color: #005B96; }
.header { text-align: center; border-bottom: 2px solid #87CEEB; padding-bottom: 20px; }
.patient-info { margin: 20px 0; padding: 15px; background: #f8f9fa; border-radius: 8px; }
table { width: 100%; border-collapse: collapse; margin: 20px 0; }
th, td { padding: 12px; text-align: left; border-bottom: 1px solid #ddd; }
th { background: #87CEEB; color: white; }
.abnormal { color: red; font-weight: bold; }
.normal { color: green; }
.footer { margin-top: 40px; text-align: center; font-size: 12px; color: #666; }
"""


def stored_artifact(report: Report) -> Optional[Path]:
    """Path of the stored report file, if it exists under REPORTS_DIR"""
    if not report.pdf_path:
        return None
    root = Path(settings.REPORTS_DIR).resolve()
    candidate = (root / report.pdf_path).resolve()
    if root != candidate and root not in candidate.parents:
        return None
    return candidate if candidate.is_file() else None


def _parameter_row(parameter: dict) -> str:
    abnormal = bool(parameter.get("is_abnormal"))
    cells = [
        escape(str(parameter.get("parameter_name", ""))),
        escape(str(parameter.get("value", ""))),
        escape(str(parameter.get("unit", ""))),
        escape(str(parameter.get("normal_range", ""))),
    ]
    status_cell = (
        f'<td class="{"abnormal" if abnormal else "normal"}">{"Abnormal" if abnormal else "Normal"}</td>'
    )
    return "<tr>" + "".join(f"<td>{c}</td>" for c in cells) + status_cell + "</tr>"


def render_report_html(report: Report) -> str:
    patient = report.patient
    result = report.result
    test = result.test if result is not None else None
    rows = "".join(_parameter_row(p) for p in (result.parameter_results if result else []) or [])
    generated = report.generated_at.strftime("%d/%m/%Y") if report.generated_at else ""

    return f"""<!DOCTYPE html>
<html>
<head>
<title>Report - {escape(patient.patient_id if patient else "")}</title>
<style>{_STYLE}</style>
</head>
<body>
<div class="header">
<h1>{escape(settings.EMAIL_FROM_NAME)}</h1>
</div>
<div class="patient-info">
<strong>Patient ID:</strong> {escape(patient.patient_id if patient else "")}<br>
<strong>Name:</strong> {escape(patient.name if patient else "")}<br>
<strong>Phone:</strong> {escape(patient.phone if patient else "")}<br>
<strong>Date:</strong> {generated}
</div>
<h2>{escape(test.name if test else "Test Report")}</h2>
<table>
<tr><th>Parameter</th><th>Value</th><th>Unit</th><th>Normal Range</th><th>Status</th></tr>
{rows}
</table>
<div class="footer">
<p>This is a computer generated report.</p>
</div>
</body>
</html>
"""

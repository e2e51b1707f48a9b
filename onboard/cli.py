#!/usr/bin/env python3
"""
Scripted onboarding submission.

Leest antwoorden uit een JSON-bestand, stuurt ze door dezelfde form-state
als het webformulier (validatie incl.) en post naar /api/submit.

Voorbeeld answers.json:
    {
      "values": {"companyName": "Acme", "instagram": "@acme", ...},
      "phone": {"raw": "2125550100", "country": "us"},
      "files": {"brandVoiceFile": ["docs/voice.pdf"]}
    }
"""
import argparse
import json
import mimetypes
import sys
from pathlib import Path

from onboard.forms.onboarding import OnboardingForm, SelectedFile
from onboard.forms.submitter import FormSubmitter


def load_selected_file(path: Path) -> SelectedFile:
    data = path.read_bytes()
    ctype = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return SelectedFile(name=path.name, size=len(data), content_type=ctype, data=data)


def build_form(answers: dict, base_dir: Path) -> OnboardingForm:
    form = OnboardingForm()
    for name, value in (answers.get("values") or {}).items():
        form.handle_change(name, str(value))

    phone = answers.get("phone") or {}
    if phone.get("raw"):
        form.set_phone(phone["raw"], phone.get("country"))

    for field_key, paths in (answers.get("files") or {}).items():
        form.add_selected_files(field_key, [load_selected_file(base_dir / p) for p in paths])
    return form


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Submit an onboarding intake from a JSON answers file.")
    parser.add_argument("answers", type=Path, help="JSON file with values, phone and files")
    parser.add_argument("--url", default="http://localhost:8000", help="Base URL of the intake service")
    args = parser.parse_args(argv)

    answers = json.loads(args.answers.read_text(encoding="utf-8"))
    form = build_form(answers, args.answers.parent)

    for idx in range(len(form.open_sections)):
        state = "complete" if form.section_completed(idx) else "incomplete"
        print(f"section {idx + 1}: {state}")
    for name, message in form.field_errors.items():
        print(f"  {name}: {message}")

    result = form.submit(FormSubmitter(args.url))
    if result is None:
        print(f"✗ {form.error}")
        return 1

    print(f"✓ {form.success}")
    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())

import pytest

from onboard.core.errors import SubmissionFailed, SubmissionRejected
from onboard.forms.onboarding import (
    ERR_EMAIL,
    ERR_INSTAGRAM,
    ERR_WEBSITE,
    SUCCESS_MESSAGE,
    OnboardingForm,
    SelectedFile,
)
from onboard.forms.validators import is_valid_instagram, is_valid_url, strip_handle


class RecordingSubmitter:
    def __init__(self, fail: bool = False):
        self.calls = []
        self.fail = fail

    def submit(self, data, files):
        self.calls.append((data, files))
        if self.fail:
            raise SubmissionFailed("Submission failed")
        return {"ok": True}


def _file(name="guide.pdf", size=10):
    return SelectedFile(name=name, size=size, content_type="application/pdf", data=b"x" * size)


def _fill_required_text(form: OnboardingForm):
    for name, value in {
        "companyName": "Acme",
        "contactName": "Jane Doe",
        "email": "jane@acme.com",
        "instagram": "acme",
        "brandVoice": "Friendly",
        "salesPitch": "Short and sweet",
        "offerInfo": "Three tiers",
        "brandFAQ": "Since 2010",
        "productFAQ": "Ships in 2 days",
        "salesGuide": "DM first",
        "leadQualification": "SMBs",
    }.items():
        form.handle_change(name, value)


# -------------------------
# 1) Validation
# -------------------------
def test_instagram_with_leading_at_is_accepted():
    assert strip_handle("@My.Handle") == "My.Handle"
    assert is_valid_instagram("My.Handle")

    form = OnboardingForm()
    form.handle_change("instagram", "@My.Handle")
    assert form.values["instagram"] == "My.Handle"
    assert "instagram" not in form.field_errors


@pytest.mark.parametrize("handle", ["ends.with.dot.", "has space", "a" * 31, "bad!chars"])
def test_invalid_instagram_sets_error(handle):
    form = OnboardingForm()
    form.handle_change("instagram", handle)
    assert form.field_errors["instagram"] == ERR_INSTAGRAM


def test_field_errors_set_and_clear_on_change():
    form = OnboardingForm()
    form.handle_change("email", "not-an-email")
    form.handle_change("website", "nope")
    assert form.field_errors == {"email": ERR_EMAIL, "website": ERR_WEBSITE}

    form.handle_change("email", "jane@acme.com")
    form.handle_change("website", "")
    assert form.field_errors == {}
    # typen wordt nooit geblokkeerd
    assert form.values["email"] == "jane@acme.com"


def test_unknown_field_is_rejected():
    with pytest.raises(KeyError):
        OnboardingForm().handle_change("favouriteColour", "blue")


# -------------------------
# 2) Section completion
# -------------------------
def test_section_one_requires_identity_and_instagram():
    form = OnboardingForm()
    for name, value in {"companyName": "Acme", "contactName": "Jane", "email": "jane@acme.com"}.items():
        form.handle_change(name, value)
    assert not form.section_completed(0)

    form.handle_change("instagram", "acme")
    assert form.section_completed(0)

    form.handle_change("website", "not a url")
    assert not form.section_completed(0)


def test_text_or_file_satisfies_sections_two_and_three():
    form = OnboardingForm()
    form.handle_change("brandVoice", "Friendly")
    form.add_selected_files("salesPitchFile", [_file("pitch.docx")])
    assert not form.section_completed(1)

    form.add_selected_files("offerInfoFile", [_file("offer.pdf")])
    assert form.section_completed(1)

    for key in ("brandFAQ", "productFAQ", "salesGuide"):
        form.handle_change(key, "text")
    assert not form.section_completed(2)
    form.add_selected_files("leadQualificationFile", [_file("icp.csv")])
    assert form.section_completed(2)


def test_section_four_only_needs_crm():
    form = OnboardingForm()
    form.handle_change("links.calendars", "definitely not a url")
    assert not form.section_completed(3)
    form.handle_change("crm", "hubspot")
    assert form.section_completed(3)


def test_section_five_notes_or_valid_loom():
    form = OnboardingForm()
    assert not form.section_completed(4)
    form.handle_change("loomUrl", "loom")
    assert not form.section_completed(4)
    form.handle_change("loomUrl", "https://www.loom.com/share/abc123")
    assert form.section_completed(4)

    form.handle_change("loomUrl", "")
    form.handle_change("notes", "Launch in May")
    assert form.section_completed(4)


def test_sections_toggle_independently():
    form = OnboardingForm()
    form.toggle_open(2)
    form.toggle_open(4)
    assert form.open_sections == [True, False, True, False, True]
    form.toggle_open(0)
    assert form.open_sections == [False, False, True, False, True]


# -------------------------
# 3) File bookkeeping
# -------------------------
def test_reselecting_same_file_is_a_no_op():
    form = OnboardingForm()
    assert form.add_selected_files("brandVoiceFile", [_file("guide.pdf", 10)]) == 1
    assert form.add_selected_files("brandVoiceFile", [_file("guide.pdf", 10)]) == 1
    assert form.file_counts["brandVoiceFile"] == 1

    # zelfde naam, andere grootte is een ander bestand
    assert form.add_selected_files("brandVoiceFile", [_file("guide.pdf", 11)]) == 2


def test_extension_allowlist_is_case_insensitive():
    form = OnboardingForm()
    count = form.add_selected_files(
        "accessDocs",
        [_file("A.PDF"), _file("sheet.XlSx"), _file("photo.png"), _file("noext")],
    )
    assert count == 2
    assert [f.name for f in form.files_by_field["accessDocs"]] == ["A.PDF", "sheet.XlSx"]


def test_removed_files_are_not_submitted():
    form = OnboardingForm()
    _fill_required_text(form)
    form.add_selected_files("brandVoiceFile", [_file("a.pdf"), _file("b.pdf")])
    form.remove_file("brandVoiceFile", 0)
    form.remove_file("brandVoiceFile", 7)

    _, files = form.build_submission()
    assert [name for _, (name, _, _) in files] == ["b.pdf"]
    assert form.file_counts["brandVoiceFile"] == 1

    form.clear_files("brandVoiceFile")
    assert form.build_submission()[1] == []


def test_submission_carries_links_and_phone_companions():
    form = OnboardingForm()
    form.handle_change("links.landingPages", "https://acme.com/lp")
    form.set_phone("2125550100", "us")

    data, _ = form.build_submission()
    fields = dict(data)
    assert fields["links.landingPages"] == "https://acme.com/lp"
    assert fields["phone_e164"] == "+12125550100"
    assert fields["phone_country"] == "US"
    assert fields["phone"] == "2125550100"


# -------------------------
# 4) Submit
# -------------------------
def test_missing_instagram_aborts_before_network():
    form = OnboardingForm()
    form.toggle_open(0)  # sectie 1 dicht
    submitter = RecordingSubmitter()

    assert form.submit(submitter) is None
    assert submitter.calls == []
    assert form.error == "Instagram Handle is required"
    assert form.open_sections[0] is True
    assert form.submitting is False


def test_first_failure_wins_in_fixed_order():
    form = OnboardingForm()
    form.handle_change("instagram", "acme")
    form.handle_change("brandVoice", "Friendly")
    form.handle_change("salesPitch", "Pitch")
    # offerInfo en brandFAQ ontbreken allebei; offerInfo komt eerst
    form.submit(RecordingSubmitter())
    assert form.error == "Offer Information is required (paste or upload)"
    assert form.open_sections[1] is True
    assert form.open_sections[2] is False


def test_text_only_submission_is_never_blocked_by_files():
    form = OnboardingForm()
    _fill_required_text(form)
    submitter = RecordingSubmitter()

    assert form.submit(submitter) == {"ok": True}
    (data, files), = submitter.calls
    assert files == []
    assert dict(data)["brandVoice"] == "Friendly"


def test_successful_submit_resets_state():
    form = OnboardingForm()
    _fill_required_text(form)
    form.add_selected_files("brandVoiceFile", [_file()])
    form.set_phone("2125550100", "gb")

    form.submit(RecordingSubmitter())

    assert form.success == SUCCESS_MESSAGE
    assert form.values["companyName"] == ""
    assert form.files_by_field == {} and form.file_counts == {}
    assert form.phone.raw == "" and form.phone.country == "us"
    assert form.field_errors == {}


def test_failed_submit_keeps_state_and_reports():
    form = OnboardingForm()
    _fill_required_text(form)

    assert form.submit(RecordingSubmitter(fail=True)) is None
    assert form.error == "Submission failed"
    assert form.values["companyName"] == "Acme"
    assert form.success is None


def test_check_required_raises_with_section():
    form = OnboardingForm()
    form.handle_change("instagram", "acme")

    with pytest.raises(SubmissionRejected) as exc:
        form.check_required()

    assert str(exc.value) == "Brand Voice Guide is required (paste or upload)"
    assert exc.value.section == 1
    # check_required zelf laat de state ongemoeid
    assert form.error is None
    assert form.open_sections[1] is False


# -------------------------
# 5) Trailing newline
# -------------------------
def test_trailing_newline_is_not_a_valid_value():
    assert not is_valid_instagram("acme\n")
    assert not is_valid_url("https://acme.com\n")


def test_instagram_with_trailing_newline_blocks_section_one():
    form = OnboardingForm()
    for name, value in {"companyName": "Acme", "contactName": "Jane", "email": "jane@acme.com"}.items():
        form.handle_change(name, value)
    form.handle_change("instagram", "acme\n")

    assert form.field_errors["instagram"] == ERR_INSTAGRAM
    assert not form.section_completed(0)

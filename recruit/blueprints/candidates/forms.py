from flask_wtf import FlaskForm
from wtforms import Field, FloatField, IntegerField, StringField, TextAreaField
from wtforms.validators import AnyOf, Email, Length, NumberRange, Optional


class _NullableMixin:
    """Treat JSON null / "" as "no value" instead of a conversion error."""

    def process_formdata(self, valuelist):
        if not valuelist or valuelist[0] is None or valuelist[0] == "":
            self.data = None
            return
        super().process_formdata(valuelist)


class NullableIntegerField(_NullableMixin, IntegerField):
    pass


class NullableFloatField(_NullableMixin, FloatField):
    pass


class IdListField(Field):
    """A JSON array of integer ids."""

    def _value(self):
        return ",".join(str(i) for i in (self.data or []))

    def process_formdata(self, valuelist):
        ids = []
        for v in valuelist:
            if v is None or v == "":
                continue
            if isinstance(v, bool):
                raise ValueError(f"Not a valid id: {v!r}")
            try:
                ids.append(int(v))
            except (TypeError, ValueError):
                raise ValueError(f"Not a valid id: {v!r}")
        self.data = ids


class AnalyzeForm(FlaskForm):
    job_id = NullableIntegerField("Job", validators=[Optional()])
    candidate_ids = IdListField("Candidates", default=list)


INTERVIEW_STATUSES = ["scheduled", "done", "no_show", "canceled"]


class ShortlistUpdateForm(FlaskForm):
    """Fields a recruiter may edit on a shortlist outcome. Unknown keys are ignored."""
    name = StringField("Name", validators=[Optional(), Length(max=240)])
    email = StringField("Email", validators=[Optional(), Email()])
    phone = StringField("Phone", validators=[Optional(), Length(max=50)])
    interview_status = StringField("Interview status", validators=[Optional(), AnyOf(INTERVIEW_STATUSES)])
    ai_score = NullableFloatField("AI score", validators=[Optional(), NumberRange(min=0, max=100)])
    notes = TextAreaField("Notes")

    def submitted_fields(self):
        return [f for f in self if f.raw_data]

    def apply_to(self, row):
        changed = []
        for f in self.submitted_fields():
            if getattr(row, f.name) != f.data:
                setattr(row, f.name, f.data)
                changed.append(f.name)
        return changed

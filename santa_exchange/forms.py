from __future__ import annotations

from flask_wtf import FlaskForm
from wtforms import BooleanField, SelectField, StringField, TextAreaField
from wtforms.validators import DataRequired, Email, Length, Optional, Regexp

from .errors import ValidationError


def _strip(value):
    return value.strip() if isinstance(value, str) else value


def _lower(value):
    return value.lower() if isinstance(value, str) else value


single_line = Regexp(r"^[^\r\n]*\Z", message="Must be a single line.")


class _TextOnly:
    """JSON bodies can carry numbers, lists or objects; only strings are accepted."""

    def process_formdata(self, valuelist):
        if valuelist and not isinstance(valuelist[0], str):
            self.data = None
            raise ValueError("Must be text.")
        super().process_formdata(valuelist)


class TextField(_TextOnly, StringField):
    pass


class LongTextField(_TextOnly, TextAreaField):
    pass


class CreateEventForm(FlaskForm):
    name = TextField("Event name", filters=[_strip], validators=[DataRequired(), single_line, Length(max=120)])
    description = LongTextField("Description", filters=[_strip], validators=[Optional(), Length(max=2000)])
    host_email = TextField(
        "Host email", filters=[_strip, _lower], validators=[DataRequired(), Email(), Length(max=255)]
    )
    owner_id = TextField("Owner", filters=[_strip], validators=[Optional(), single_line, Length(max=64)])


class JoinEventForm(FlaskForm):
    name = TextField("Name", filters=[_strip], validators=[DataRequired(), single_line, Length(max=64)])
    email = TextField("Email", filters=[_strip, _lower], validators=[DataRequired(), Email(), Length(max=255)])
    wishlist_q1 = LongTextField("What would you love to get?", filters=[_strip], validators=[DataRequired(), Length(max=500)])
    wishlist_q2 = LongTextField("Anything else we should know?", filters=[_strip], validators=[DataRequired(), Length(max=500)])


class MessageForm(FlaskForm):
    content = LongTextField("Message", filters=[_strip], validators=[DataRequired(), Length(max=2000)])
    to = SelectField("To", choices=[("receiver", "My recipient"), ("santa", "My Santa")], default="receiver")


class RedrawForm(FlaskForm):
    confirm = BooleanField("I understand all pairings and messages will be replaced")


def validated(form: FlaskForm) -> FlaskForm:
    """Validate a submitted form or raise ValidationError with its field errors."""
    if not form.validate_on_submit():
        fields = {name: errors for name, errors in form.errors.items()}
        first = next(iter(fields.items()), None)
        message = f"{first[0]}: {first[1][0]}" if first else "Invalid input."
        raise ValidationError(message, fields=fields)
    return form

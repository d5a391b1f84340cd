"""
Unit Tests for complaint schemas
"""
import pytest
from pydantic import ValidationError

from app.models.complaint import ComplaintCategory
from app.schemas.complaint import (
    ComplaintCreate,
    ComplaintUpdate,
    ComplaintStatusUpdate,
)


class TestComplaintCreate:

    def test_valid(self):
        data = ComplaintCreate(title="Broken router", description="No signal", category="Technical")

        assert data.category == ComplaintCategory.TECHNICAL

    def test_text_trimmed(self):
        data = ComplaintCreate(title="  Broken router ", description="\tNo signal\n", category="Billing")

        assert data.title == "Broken router"
        assert data.description == "No signal"

    def test_title_at_limit(self):
        data = ComplaintCreate(title="a" * 100, description="d", category="Other")

        assert len(data.title) == 100

    def test_title_too_long(self):
        with pytest.raises(ValidationError):
            ComplaintCreate(title="a" * 101, description="d", category="Other")

    def test_title_length_counted_after_trim(self):
        data = ComplaintCreate(title="  " + "a" * 100 + "  ", description="d", category="Other")

        assert len(data.title) == 100

    @pytest.mark.parametrize("field", ["title", "description"])
    def test_whitespace_only_rejected(self, field):
        payload = {"title": "t", "description": "d", "category": "Other", field: "   "}

        with pytest.raises(ValidationError):
            ComplaintCreate(**payload)

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError):
            ComplaintCreate(title="t", description="d", category="Plumbing")

    def test_missing_fields_rejected(self):
        with pytest.raises(ValidationError):
            ComplaintCreate(title="t")


class TestComplaintUpdate:

    def test_partial(self):
        data = ComplaintUpdate(title="New")

        assert data.model_dump(exclude_unset=True) == {"title": "New"}

    def test_empty(self):
        assert ComplaintUpdate().model_dump(exclude_unset=True) == {}

    def test_status_not_checked_here(self):
        """Checked after the edit filter, so a value a user cannot set never fails"""
        assert ComplaintUpdate(status="Closed").status == "Closed"

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            ComplaintUpdate(title=" ")


class TestComplaintStatusUpdate:

    @pytest.mark.parametrize("value", ["Pending", "In Progress", "Resolved"])
    def test_valid_values(self, value):
        assert ComplaintStatusUpdate(status=value).status.value == value

    @pytest.mark.parametrize("value", ["Closed", "pending", "", None])
    def test_invalid_values(self, value):
        with pytest.raises(ValidationError):
            ComplaintStatusUpdate(status=value)

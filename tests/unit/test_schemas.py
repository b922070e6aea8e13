"""
Unit tests for request schema validation
"""

import pytest
from pydantic import ValidationError

from vending_info.core.schemas.auth import RegisterRequest
from vending_info.core.schemas.machine import MachineCreate, MachineUpdate
from vending_info.core.schemas.review import ReviewCreate

pytestmark = pytest.mark.unit


class TestMachineSchemas:

    def test_coordinates_are_normalized(self):
        machine = MachineCreate(name="A", location="B", coordinates=" 52.5200 , 13.4050 ")
        assert machine.coordinates == "52.52,13.405"

    def test_blank_coordinates_become_none(self):
        assert MachineUpdate(coordinates="  ").coordinates is None

    @pytest.mark.parametrize("coordinates", ["52.52", "north,east", "91,0", "0,181"])
    def test_invalid_coordinates(self, coordinates):
        with pytest.raises(ValidationError):
            MachineCreate(name="A", location="B", coordinates=coordinates)

    def test_name_and_location_required(self):
        with pytest.raises(ValidationError):
            MachineCreate(name="", location="B")
        with pytest.raises(ValidationError):
            MachineCreate(name="A")

    @pytest.mark.parametrize("field", ["name", "location"])
    def test_whitespace_text_is_blank(self, field):
        values = {"name": "A", "location": "B", field: " \t "}
        with pytest.raises(ValidationError):
            MachineCreate(**values)
        with pytest.raises(ValidationError):
            MachineUpdate(**{field: "  "})

    def test_text_is_stripped(self):
        machine = MachineCreate(name=" A ", location=" B ")
        assert (machine.name, machine.location) == ("A", "B")
        assert MachineUpdate(name=" C ").name == "C"
        assert MachineUpdate().name is None

    def test_lists_default_to_empty(self):
        machine = MachineCreate(name="A", location="B")
        assert machine.products == []
        assert machine.payment_methods == []
        assert MachineUpdate().products is None


class TestReviewSchemas:

    @pytest.mark.parametrize("rating", [0, 6, -1])
    def test_rating_range(self, rating):
        with pytest.raises(ValidationError):
            ReviewCreate(machine_id=1, rating=rating, comment="ok")

    def test_valid_review(self):
        assert ReviewCreate(machine_id=1, rating=5, comment="great").rating == 5

    def test_comment_is_stripped(self):
        assert ReviewCreate(machine_id=1, rating=5, comment="  great ").comment == "great"

    def test_whitespace_comment_rejected(self):
        with pytest.raises(ValidationError, match="Comment is required"):
            ReviewCreate(machine_id=1, rating=5, comment="   ")


class TestRegisterSchema:

    def test_email_is_normalized(self):
        request = RegisterRequest(email="  New.Owner@Example.COM ", password="password123", name="New")
        assert request.email == "new.owner@example.com"

    @pytest.mark.parametrize("email", ["no-at-sign", "@example.com", "user@localhost", "a b@example.com"])
    def test_invalid_email(self, email):
        with pytest.raises(ValidationError):
            RegisterRequest(email=email, password="password123", name="New")

    def test_password_length(self):
        with pytest.raises(ValidationError):
            RegisterRequest(email="a@example.com", password="short", name="New")

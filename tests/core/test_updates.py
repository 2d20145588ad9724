"""Update Payload tests — sent-fields diff and the empty-update policy."""

import pytest

from crudcore.core.domain_types import EmptyUpdatePolicy
from crudcore.core.errors import ValidationError
from crudcore.core.updates import collect_update_fields
from crudcore.schemas.recipe import RecipeUpdate


def test_only_sent_fields_collected():
    body = RecipeUpdate(name="Soup")
    assert collect_update_fields(body, EmptyUpdatePolicy.ALLOW) == {"name": "Soup"}


def test_explicit_null_is_kept():
    body = RecipeUpdate(description=None)
    assert collect_update_fields(body, EmptyUpdatePolicy.ALLOW) == {"description": None}


def test_empty_allowed():
    assert collect_update_fields(RecipeUpdate(), EmptyUpdatePolicy.ALLOW) == {}


def test_empty_rejected():
    with pytest.raises(ValidationError) as exc_info:
        collect_update_fields(RecipeUpdate(), EmptyUpdatePolicy.REJECT)
    assert exc_info.value.field == "body"


def test_non_empty_passes_under_reject():
    body = RecipeUpdate(servings=2)
    assert collect_update_fields(body, EmptyUpdatePolicy.REJECT) == {"servings": 2}

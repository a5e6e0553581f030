from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from bizz_ai.llm import validate_stack_payload
from bizz_ai.storage import Storage

from conftest import make_stack_payload


def _profile(storage: Storage, user_id: str):
    return storage.create_business_profile(
        user_id,
        business_type="agencia",
        team_size="medium",
        objective="custos",
        ai_knowledge="avancado",
        current_tools=["HubSpot"],
    )


def test_get_or_create_user_reuses_existing_email(storage: Storage) -> None:
    user, created = storage.get_or_create_user("Ana", "ana@x.com")
    again, created_again = storage.get_or_create_user("Outra Ana", "ana@x.com")

    assert created is True
    assert created_again is False
    assert again.id == user.id
    assert again.name == "Ana"


def test_email_is_unique(storage: Storage) -> None:
    storage.create_user("Ana", "ana@x.com")

    with pytest.raises(IntegrityError):
        storage.create_user("Ana", "ana@x.com")


def test_update_user_stripe_info(storage: Storage) -> None:
    user = storage.create_user("Ana", "ana@x.com")

    updated = storage.update_user_stripe_info(user.id, "cus_123", "sub_456")

    assert updated.stripe_customer_id == "cus_123"
    assert storage.get_user(user.id).stripe_subscription_id == "sub_456"
    assert storage.update_user_stripe_info("missing", "cus_1") is None


def test_profiles_are_listed_per_user(storage: Storage) -> None:
    user = storage.create_user("Ana", "ana@x.com")
    first = _profile(storage, user.id)
    _profile(storage, user.id)

    assert storage.get_business_profile_by_user_id(user.id).id == first.id
    assert len(storage.list_business_profiles_by_user_id(user.id)) == 2
    assert storage.get_business_profile(first.id).current_tools == ["HubSpot"]


def test_save_generated_stack_assigns_positional_priorities(storage: Storage) -> None:
    user = storage.create_user("Ana", "ana@x.com")
    profile = _profile(storage, user.id)
    generated = validate_stack_payload(make_stack_payload(count=6))

    stack, recommendations = storage.save_generated_stack(profile.id, generated)

    assert stack.profile_id == profile.id
    assert stack.implementation_tips == ["Comece pelo CRM", "Automatize o follow-up"]
    assert [rec.priority for rec in recommendations] == [1, 2, 3, 4, 5, 6]
    stored = storage.get_recommendations_by_profile_id(profile.id)
    assert sorted(rec.priority for rec in stored) == [1, 2, 3, 4, 5, 6]
    assert storage.get_ai_stack_by_profile_id(profile.id).id == stack.id
    assert storage.count_recommendations() == 6


def test_create_ai_stack_without_recommendations(storage: Storage) -> None:
    user = storage.create_user("Ana", "ana@x.com")
    profile = _profile(storage, user.id)

    stack = storage.create_ai_stack(
        profile.id,
        title="Stack",
        description="Resumo",
        overall_analysis="Análise",
    )

    assert storage.get_ai_stack_by_profile_id(profile.id).id == stack.id
    assert storage.get_recommendations_by_profile_id(profile.id) == []


def test_lookups_for_unknown_ids_return_none(storage: Storage) -> None:
    assert storage.get_user("missing") is None
    assert storage.get_business_profile("missing") is None
    assert storage.get_ai_stack_by_profile_id("missing") is None


def test_recommendations_are_returned_in_insertion_order(storage: Storage) -> None:
    user = storage.create_user("Ana", "ana@x.com")
    profile = _profile(storage, user.id)
    generated = validate_stack_payload(make_stack_payload(count=2))

    storage.create_ai_recommendation(profile.id, generated.recommendations[0], priority=2)
    storage.create_ai_recommendation(profile.id, generated.recommendations[1], priority=1)

    stored = storage.get_recommendations_by_profile_id(profile.id)
    assert [(rec.tool_name, rec.priority) for rec in stored] == [("Tool 1", 2), ("Tool 2", 1)]


def test_list_ai_stacks(storage: Storage) -> None:
    user = storage.create_user("Ana", "ana@x.com")
    first = _profile(storage, user.id)
    second = _profile(storage, user.id)
    generated = validate_stack_payload(make_stack_payload(count=1))
    storage.save_generated_stack(first.id, generated)
    storage.save_generated_stack(second.id, generated)

    assert [stack.profile_id for stack in storage.list_ai_stacks()] == [first.id, second.id]

"""Tests for descriptors, the presenter registry and missing-association policies."""

import pytest
from pydantic import ValidationError

import parkes_presenter.presenter as presenter_module
from parkes_presenter import (
    AssociationSpec,
    MissingAssociationPolicy,
    MissingMode,
    PresenterConfigurationError,
    PresenterRegistry,
    ProjectionMode,
    RecordDescriptor,
    SplitAssociations,
    extend_models,
)
from parkes_presenter.config import Settings


class TestMissingAssociationPolicy:
    """Tests for MissingAssociationPolicy shorthands and resolution."""

    @pytest.mark.parametrize("value", [None, False, "disabled"])
    def test_disabled_shorthands(self, value):
        """Falsy values and 'disabled' turn the policy off everywhere."""
        policy = MissingAssociationPolicy.coerce(value)
        assert policy.resolve("comment") is MissingMode.DISABLED

    @pytest.mark.parametrize("value,expected", [("load", MissingMode.LOAD), ("warn", MissingMode.WARN)])
    def test_mode_shorthand_applies_to_every_type(self, value, expected):
        policy = MissingAssociationPolicy.coerce(value)
        assert policy.resolve("comment") is expected
        assert policy.resolve("user") is expected

    def test_type_mapping_applies_only_to_named_types(self):
        """A {type: mode} mapping leaves other types disabled."""
        policy = MissingAssociationPolicy.coerce({"comment": "warn"})
        assert policy.resolve("comment") is MissingMode.WARN
        assert policy.resolve("user") is MissingMode.DISABLED

    def test_structured_form(self):
        """Overrides take precedence over the default."""
        policy = MissingAssociationPolicy(default="load", overrides={"comment": False})
        assert policy.resolve("comment") is MissingMode.DISABLED
        assert policy.resolve("post") is MissingMode.LOAD

    def test_type_named_default_in_type_mapping(self):
        """A mapping with other type names is a type mapping even if one is 'default'."""
        policy = MissingAssociationPolicy.coerce({"default": "warn", "comment": "load"})
        assert policy.default is MissingMode.DISABLED
        assert policy.resolve("default") is MissingMode.WARN
        assert policy.resolve("comment") is MissingMode.LOAD
        assert policy.resolve("user") is MissingMode.DISABLED

    def test_structured_mapping(self):
        policy = MissingAssociationPolicy.coerce({"default": "warn", "overrides": {"user": "load"}})
        assert policy.resolve("comment") is MissingMode.WARN
        assert policy.resolve("user") is MissingMode.LOAD

    def test_coerce_returns_existing_policy(self):
        policy = MissingAssociationPolicy(default="warn")
        assert MissingAssociationPolicy.coerce(policy) is policy

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValidationError):
            MissingAssociationPolicy.coerce("explode")


class TestAssociationSpec:
    """Tests for AssociationSpec normalization."""

    def test_bare_name(self):
        spec = AssociationSpec.model_validate("posts")
        assert spec == AssociationSpec(association="posts", rename="posts")

    def test_rename(self):
        spec = AssociationSpec.model_validate({"association": "user", "rename": "author"})
        assert spec.association == "user"
        assert spec.rename == "author"

    def test_legacy_attribute_key(self):
        """The older {attribute, rename} form is accepted."""
        spec = AssociationSpec.model_validate({"attribute": "user", "rename": "author"})
        assert spec.association == "user"
        assert spec.rename == "author"

    def test_rename_defaults_to_association(self):
        spec = AssociationSpec.model_validate({"association": "team"})
        assert spec.rename == "team"


class TestRecordDescriptor:
    """Tests for RecordDescriptor validation."""

    def test_defaults(self):
        descriptor = RecordDescriptor(type_name="post")
        assert descriptor.public_attributes is None
        assert descriptor.private_attributes is None
        assert descriptor.presentation_key == "uuid"
        assert descriptor.missing_associations.resolve("post") is MissingMode.DISABLED
        assert descriptor.associations_for(ProjectionMode.PUBLIC) == []

    def test_flat_associations_used_for_both_modes(self):
        descriptor = RecordDescriptor(type_name="user", nested_associations=["posts", "team"])
        public = descriptor.associations_for(ProjectionMode.PUBLIC)
        private = descriptor.associations_for(ProjectionMode.PRIVATE)
        assert [spec.rename for spec in public] == ["posts", "team"]
        assert public == private

    def test_split_associations(self):
        descriptor = RecordDescriptor(
            type_name="comment",
            nested_associations={"public": ["user"], "private": ["user", "post"]},
        )
        assert isinstance(descriptor.nested_associations, SplitAssociations)
        assert [s.rename for s in descriptor.associations_for(ProjectionMode.PUBLIC)] == ["user"]
        assert [s.rename for s in descriptor.associations_for(ProjectionMode.PRIVATE)] == ["user", "post"]

    def test_policy_shorthand(self):
        descriptor = RecordDescriptor(type_name="comment", missing_associations="warn")
        assert descriptor.missing_associations.resolve("comment") is MissingMode.WARN

    def test_malformed_association_rejected(self):
        with pytest.raises(ValidationError):
            RecordDescriptor(type_name="post", nested_associations=[{"rename": "author"}])


class TestPresenterRegistry:
    """Tests for PresenterRegistry."""

    def test_register_and_get(self):
        registry = PresenterRegistry()
        registry.register(RecordDescriptor(type_name="post", public_attributes=["uuid"]))

        retrieved = registry.get("post")
        assert retrieved is not None
        assert retrieved.public_attributes == ["uuid"]

    def test_has_descriptor(self):
        registry = PresenterRegistry([RecordDescriptor(type_name="post")])
        assert registry.has_descriptor("post") is True
        assert registry.has_descriptor("user") is False

    def test_get_nonexistent_returns_none(self):
        assert PresenterRegistry().get("post") is None

    def test_require_nonexistent_raises(self):
        with pytest.raises(PresenterConfigurationError, match="post"):
            PresenterRegistry().require("post")

    def test_all_descriptors_is_a_copy(self):
        registry = PresenterRegistry([RecordDescriptor(type_name="post")])
        registry.all_descriptors().clear()
        assert registry.has_descriptor("post")


class TestExtendModels:
    """Tests for extend_models registration."""

    def test_registers_every_model(self, blog_models):
        registry = extend_models(blog_models)
        assert set(registry.all_descriptors()) == {"user", "post", "team", "comment"}
        assert registry.require("post").associations_for(ProjectionMode.PUBLIC) == [
            AssociationSpec(association="user", rename="author")
        ]

    def test_defaults_from_settings(self, blog_models):
        """Without options the package settings apply (load, uuid)."""
        registry = extend_models(blog_models)
        descriptor = registry.require("user")
        assert descriptor.presentation_key == "uuid"
        assert descriptor.missing_associations.resolve("user") is MissingMode.LOAD

    def test_settings_override(self, blog_models, monkeypatch):
        monkeypatch.setattr(presenter_module, "settings", Settings(presentation_key="key", missing_associations="warn"))
        descriptor = extend_models(blog_models).require("user")
        assert descriptor.presentation_key == "key"
        assert descriptor.missing_associations.resolve("user") is MissingMode.WARN

    def test_options_override_settings(self, blog_models):
        registry = extend_models(blog_models, {"missing_associations": {"comment": "warn"}})
        assert registry.require("comment").missing_associations.resolve("comment") is MissingMode.WARN
        assert registry.require("user").missing_associations.resolve("user") is MissingMode.DISABLED

    def test_model_fields_override_options(self):
        registry = extend_models(
            {"post": {"public_attributes": ["uuid"], "presentation_key": "key"}},
            {"presentation_key": "slug"},
        )
        assert registry.require("post").presentation_key == "key"

    def test_reads_class_attributes(self):
        """Classes carrying descriptor fields are keyed by class name."""

        class Post:
            public_attributes = ["uuid", "title"]
            private_attributes = ["followers"]

        registry = extend_models([Post], {"missing_associations": False})
        descriptor = registry.require("Post")
        assert descriptor.public_attributes == ["uuid", "title"]
        assert descriptor.private_attributes == ["followers"]
        assert descriptor.missing_associations.resolve("Post") is MissingMode.DISABLED

    def test_accepts_descriptors(self):
        descriptor = RecordDescriptor(type_name="ignored", public_attributes=["uuid"])
        registry = extend_models({"post": descriptor}, {"missing_associations": "warn"})

        registered = registry.require("post")
        assert registered.type_name == "post"
        assert registered.public_attributes == ["uuid"]
        assert registered.missing_associations.resolve("post") is MissingMode.WARN

    def test_extends_existing_registry(self):
        registry = PresenterRegistry([RecordDescriptor(type_name="team")])
        returned = extend_models({"post": {"public_attributes": ["uuid"]}}, registry=registry)
        assert returned is registry
        assert registry.has_descriptor("team")
        assert registry.has_descriptor("post")


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("PRESENTER_PRESENTATION_KEY", raising=False)
        monkeypatch.delenv("PRESENTER_MISSING_ASSOCIATIONS", raising=False)
        config = Settings(_env_file=None)
        assert config.presentation_key == "uuid"
        assert config.missing_associations is MissingMode.LOAD

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("PRESENTER_PRESENTATION_KEY", "key")
        monkeypatch.setenv("PRESENTER_MISSING_ASSOCIATIONS", "warn")
        config = Settings(_env_file=None)
        assert config.presentation_key == "key"
        assert config.missing_associations is MissingMode.WARN

    def test_invalid_policy_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, missing_associations="sometimes")

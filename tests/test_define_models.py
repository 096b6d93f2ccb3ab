import json

import pytest
from sqlalchemy import select

from datalayer.database import init_database
from datalayer.registry import (
    AssociationStatus,
    AssociationType,
    LoadError,
    RegistrationError,
    define_models,
)

from .conftest import POST, USER


def test_scenario_user_then_post(registry, models_dir):
    directory = models_dir(USER, POST)

    report = define_models(registry, directory)

    post = registry.lookup("Post")
    [association] = post.associations
    assert association.type is AssociationType.BELONGS_TO
    assert association.target is registry.lookup("User")
    assert registry.lookup("User").associations == []
    assert [o.status for o in report.outcomes] == [AssociationStatus.APPLIED]


def test_file_order_does_not_change_result(registry, models_dir):
    # File stems sort Post before User, the reverse of the definition dependencies
    directory = models_dir(**{"a_post": POST, "b_user": USER})

    define_models(registry, directory)

    [association] = registry.lookup("Post").associations
    assert association.target is registry.lookup("User")


def test_missing_target_does_not_escape(registry, models_dir, log_messages):
    ghost_post = dict(POST, associations=[{"type": "BelongsTo", "target_name": "Ghost"}])
    directory = models_dir(USER, ghost_post)

    report = define_models(registry, directory, verbose=True)

    assert registry.lookup("Post").associations == []
    assert [o.status for o in report.outcomes] == [AssociationStatus.SKIPPED_TARGET_MISSING]
    assert "    Relation (Ghost) not found" in log_messages


def test_invalid_type_is_rejected(registry, models_dir):
    invalid_post = dict(POST, associations=[{"type": "invalidType", "target_name": "User"}])
    directory = models_dir(USER, invalid_post)

    report = define_models(registry, directory)

    assert registry.lookup("Post").associations == []
    assert [o.status for o in report.outcomes] == [AssociationStatus.SKIPPED_INVALID]


def test_quiet_unless_verbose(registry, models_dir, log_messages):
    define_models(registry, models_dir(USER, POST))

    assert not any("DEFINING" in message for message in log_messages)


def test_load_error_propagates(registry, tmp_path):
    (tmp_path / "User.json").write_text("not json", encoding="utf-8")

    with pytest.raises(LoadError):
        define_models(registry, tmp_path)
    assert len(registry) == 0


def test_registration_error_stops_before_associations(registry, models_dir):
    duplicate = dict(USER, associations=[{"type": "OneToMany", "target_name": "Post"}])
    directory = models_dir(**{"user": USER, "user_again": duplicate, "post": POST})

    with pytest.raises(RegistrationError):
        define_models(registry, directory)
    assert all(schema.associations == [] for schema in registry)


def test_associations_work_against_sqlite(registry, models_dir, database):
    engine, session_factory = database
    user = dict(USER, associations=[
        {"type": "OneToMany", "target_name": "Post", "config": {"back_populates": "user"}},
    ])
    post = dict(POST, associations=[
        {"type": "BelongsTo", "target_name": "User", "config": {"back_populates": "posts", "on_delete": "CASCADE"}},
        {"type": "ManyToMany", "target_name": "Tag", "config": {"through": "post_tags"}},
    ])
    tag = {"name": "Tag", "columns": {"label": "string"}}
    define_models(registry, models_dir(user, post, tag))
    init_database(registry, engine)

    User = registry.lookup("User").mapped_class
    Post = registry.lookup("Post").mapped_class
    Tag = registry.lookup("Tag").mapped_class

    with session_factory() as session:
        ada = User(first_name="Ada", email="ada@example.com")
        post = Post(title="Engines", body="...", user=ada)
        post.tags.append(Tag(label="history"))
        session.add(ada)
        session.commit()
        ada_id = ada.id

    with session_factory() as session:
        stored = session.scalars(select(Post)).one()
        assert stored.user_id == ada_id
        assert stored.user.first_name == "Ada"
        assert [t.label for t in stored.tags] == ["history"]
        assert [p.title for p in stored.user.posts] == ["Engines"]


def test_self_referential_tree_against_sqlite(registry, models_dir, database):
    engine, session_factory = database
    category = {
        "name": "Category",
        "columns": {"name": "string"},
        "associations": [
            {"type": "BelongsTo", "target_name": "Category",
             "config": {"as": "parent", "foreign_key": "parent_id", "back_populates": "children"}},
            {"type": "OneToMany", "target_name": "Category",
             "config": {"as": "children", "foreign_key": "parent_id", "back_populates": "parent"}},
        ],
    }
    define_models(registry, models_dir(category))
    init_database(registry, engine)
    Category = registry.lookup("Category").mapped_class

    with session_factory() as session:
        root = Category(name="root")
        Category(name="leaf", parent=root)
        session.add(root)
        session.commit()

    with session_factory() as session:
        leaf = session.scalars(select(Category).where(Category.name == "leaf")).one()
        assert leaf.parent.name == "root"
        assert [c.name for c in leaf.parent.children] == ["leaf"]


def test_python_definitions(registry, tmp_path):
    (tmp_path / "user.json").write_text(json.dumps(USER), encoding="utf-8")
    (tmp_path / "profile.py").write_text(
        "from sqlalchemy import Text\n"
        "\n"
        "DEFINITION = {\n"
        "    'name': 'Profile',\n"
        "    'columns': {'bio': Text},\n"
        "    'associations': [{'type': 'BelongsTo', 'target_name': 'User'}],\n"
        "}\n",
        encoding="utf-8",
    )

    define_models(registry, tmp_path)

    assert [a.target.name for a in registry.lookup("Profile").associations] == ["User"]

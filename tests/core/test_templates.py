"""Tests for ``authstore.core.templates`` -- $TOKEN$ replacement."""

from __future__ import annotations

from authstore.core.templates import (
    DEFAULT_REPLACEMENTS,
    EMAIL_UNIQUE,
    USERS_TABLE_NAME,
    SQLTemplateReplacer,
    default_replacer,
)

DDL = "CREATE TABLE IF NOT EXISTS $USERS_TABLE_NAME$ (email TEXT NOT NULL $EMAIL_UNIQUE$);"


class TestDefaults:
    def test_default_table_names(self):
        assert DEFAULT_REPLACEMENTS["USERS_TABLE_NAME"] == "auth_user"
        assert DEFAULT_REPLACEMENTS["SESSIONS_TABLE_NAME"] == "auth_session"

    def test_email_unique_by_default(self):
        sql = SQLTemplateReplacer().apply(DDL)
        assert sql == "CREATE TABLE IF NOT EXISTS auth_user (email TEXT NOT NULL UNIQUE);"

    def test_none_overrides_keep_defaults(self):
        assert default_replacer(None).apply(DDL) == SQLTemplateReplacer().apply(DDL)


class TestOverrides:
    def test_table_name_override(self):
        sql = default_replacer({USERS_TABLE_NAME: "accounts"}).apply(DDL)
        assert "accounts" in sql
        assert "auth_user" not in sql

    def test_email_unique_can_be_dropped(self):
        sql = default_replacer({EMAIL_UNIQUE: ""}).apply(DDL)
        assert "UNIQUE" not in sql

    def test_partial_override_keeps_other_defaults(self):
        sql = default_replacer({EMAIL_UNIQUE: ""}).apply(DDL)
        assert "auth_user" in sql

    def test_update_is_fluent(self):
        replacer = SQLTemplateReplacer()
        assert replacer.update({"X": "y"}) is replacer
        assert replacer.values["X"] == "y"

    def test_defaults_are_not_mutated(self):
        default_replacer({USERS_TABLE_NAME: "accounts"})
        assert DEFAULT_REPLACEMENTS[USERS_TABLE_NAME] == "auth_user"


class TestApply:
    def test_unknown_tokens_left_untouched(self):
        sql = SQLTemplateReplacer().apply("UPDATE t SET $UPDATE_CONTENT$ WHERE id=$ID_PARAM_NUM$")
        assert sql == "UPDATE t SET $UPDATE_CONTENT$ WHERE id=$ID_PARAM_NUM$"

    def test_repeated_token(self):
        sql = SQLTemplateReplacer().apply("$USERS_TABLE_NAME$_idx ON $USERS_TABLE_NAME$")
        assert sql == "auth_user_idx ON auth_user"

    def test_custom_defaults(self):
        replacer = SQLTemplateReplacer({"A": "1"})
        assert replacer.apply("$A$ $USERS_TABLE_NAME$") == "1 $USERS_TABLE_NAME$"

    def test_plain_dollar_signs_ignored(self):
        assert SQLTemplateReplacer().apply("SELECT '$'") == "SELECT '$'"

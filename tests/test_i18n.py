"""Tests for notification translations."""

from __future__ import annotations

from vmrestore.i18n import set_language, t


class TestTranslate:
    def test_placeholders(self) -> None:
        assert t("restore.booted", machine_id="m1") == "m1 started"

    def test_unknown_key_falls_back_to_key(self) -> None:
        assert t("no.such.key") == "no.such.key"

    def test_missing_placeholder_left_as_is(self) -> None:
        assert t("restore.booted") == "{machine_id} started"

    def test_unsupported_language(self) -> None:
        set_language("zh_CN")
        set_language("xx_XX")
        assert t("restore.booted", machine_id="m1") == "m1 started"

    def test_chinese(self) -> None:
        set_language("zh_CN")
        assert t("restore.missing_message") == "请选择存储库和备份"

from pathlib import Path

import pytest
from pydantic import ValidationError

from code_to_docx.settings import Settings


@pytest.mark.unit
def test_settings_defaults() -> None:
    settings = Settings()

    assert settings.project == Path()
    assert settings.output == Path("code_export.docx")
    assert settings.full is False
    assert settings.changed_only is False
    assert not settings.log_file


@pytest.mark.unit
def test_settings_reject_full_with_changed_only() -> None:
    with pytest.raises(ValidationError, match="Cannot use both --full and --changed-only"):
        Settings(full=True, changed_only=True)

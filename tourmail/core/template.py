"""
Template repository.

Templates live in the emailTemplates collection. They can also be written as
.md files with YAML front matter; seed() copies file templates into the store
once, so later admin edits in the store are never overwritten.

Search order for files: ~/.tourmail/templates/{id}.md → tourmail/templates/{id}.md
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import frontmatter

from .errors import TemplateNotFoundError

if TYPE_CHECKING:
    from .models import EmailTemplate
    from .store import DocumentStore

log = logging.getLogger("tourmail.template")

COLLECTION = "emailTemplates"

# Built-in templates bundled with the package
BUILTIN_TEMPLATES_DIR = Path(__file__).parent.parent / "templates"


def parse_template_file(path: Path) -> "EmailTemplate":
    """Parse a .md template file with YAML front matter → EmailTemplate."""
    from .models import EmailTemplate, TemplateVariable

    post = frontmatter.load(str(path))
    metadata = dict(post.metadata)
    template_id = path.stem

    variables = [
        TemplateVariable(**v) if isinstance(v, dict) else TemplateVariable(name=str(v))
        for v in metadata.get("variables", []) or []
    ]
    sample_data = {str(k): str(v) for k, v in (metadata.get("sample_data") or {}).items()}

    return EmailTemplate(
        id=template_id,
        name=metadata.get("name", template_id),
        subject=metadata.get("subject", ""),
        body=post.content.strip(),
        variables=variables,
        category=metadata.get("category"),
        sample_data=sample_data,
    )


class TemplateRepository:
    """Reads and writes EmailTemplate documents."""

    def __init__(self, store: "DocumentStore") -> None:
        self._store = store

    def get(self, template_id: str) -> "EmailTemplate":
        from .models import EmailTemplate

        data = self._store.get(COLLECTION, template_id)
        if data is None:
            raise TemplateNotFoundError(template_id)
        return EmailTemplate.model_validate({**data, "id": template_id})

    def list(self) -> "list[EmailTemplate]":
        from .models import EmailTemplate

        templates = []
        for doc_id, data in self._store.list(COLLECTION):
            try:
                templates.append(EmailTemplate.model_validate({**data, "id": doc_id}))
            except ValueError as e:
                log.warning("Skipping invalid template %s: %s", doc_id, e)
        return sorted(templates, key=lambda t: t.name)

    def save(self, template: "EmailTemplate") -> None:
        self._store.set(COLLECTION, template.id, template.model_dump(mode="json", exclude={"id"}))
        log.info("Saved  template=%s", template.id)

    def delete(self, template_id: str) -> None:
        if self._store.get(COLLECTION, template_id) is None:
            raise TemplateNotFoundError(template_id)
        self._store.delete(COLLECTION, template_id)
        log.info("Deleted  template=%s", template_id)

    def seed(self, user_dir: Path | None = None) -> int:
        """Store file templates whose id is not in the store yet. Returns count added."""
        found: dict[str, Path] = {}
        for directory in (BUILTIN_TEMPLATES_DIR, user_dir):
            if directory is None or not directory.exists():
                continue
            for path in sorted(directory.glob("*.md")):
                found[path.stem] = path   # user files override built-ins

        added = 0
        for template_id, path in found.items():
            if self._store.get(COLLECTION, template_id) is not None:
                continue
            try:
                self.save(parse_template_file(path))
                added += 1
            except Exception as e:
                log.warning("Failed to load template %s: %s", path.name, e)
        return added

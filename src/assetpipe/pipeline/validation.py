"""
Validation for pipeline declarations.

Checks declarations for problems that would make a build fail or produce
surprising metadata. This does not replace schema validation done while
parsing; it runs on already-parsed declarations.
"""

from __future__ import annotations

from dataclasses import dataclass

from .dispatch import is_implemented
from .models import PipelineDeclaration


@dataclass(frozen=True)
class ValidationIssue:
    """
    Represents a validation problem.

    Attributes:
        path: Path to the problematic field (e.g., "pipelines[0].tags[2]")
        message: Human-readable description of the issue
    """

    path: str
    message: str


def validate_declaration(
    declaration: PipelineDeclaration, *, prefix: str = ""
) -> list[ValidationIssue]:
    """
    Validate a single declaration.

    Checks that:
    - The pipeline kind has a processing strategy
    - No source pattern is blank
    - No tag is blank
    - No category slot is empty or holds blank labels

    Parameters:
        declaration: Declaration to validate
        prefix: Path prefix for reported issues

    Returns:
        List of validation issues (empty if valid)
    """
    issues: list[ValidationIssue] = []

    if not is_implemented(declaration.pipeline):
        issues.append(
            ValidationIssue(
                f"{prefix}type",
                f"Pipeline kind {declaration.kind!r} is not implemented yet.",
            )
        )

    for i, pattern in enumerate(declaration.sources):
        if not pattern.strip():
            issues.append(ValidationIssue(f"{prefix}sources[{i}]", "Blank source pattern."))

    for i, tag in enumerate(declaration.tags):
        if not tag.strip():
            issues.append(ValidationIssue(f"{prefix}tags[{i}]", "Blank tag."))

    for i, slot in enumerate(declaration.categories):
        if not slot:
            issues.append(ValidationIssue(f"{prefix}categories[{i}]", "Empty category slot."))
        elif any(not label.strip() for label in slot):
            issues.append(
                ValidationIssue(f"{prefix}categories[{i}]", "Category slot has a blank label.")
            )

    return issues


def validate_declarations(declarations: list[PipelineDeclaration]) -> list[ValidationIssue]:
    """
    Validate every declaration of a manifest.

    Parameters:
        declarations: Declarations in manifest order

    Returns:
        List of validation issues (empty if valid)

    Example:
        >>> issues = validate_declarations(declarations)
        >>> for issue in issues:
        ...     print(f"{issue.path}: {issue.message}")
    """
    issues: list[ValidationIssue] = []
    for i, declaration in enumerate(declarations):
        issues.extend(validate_declaration(declaration, prefix=f"pipelines[{i}]."))
    return issues

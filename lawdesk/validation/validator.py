"""
Document Request Validation

DESIGN DECISION: A document request is validated before anything is
built or any state changes. Validation happens in two stages:

STAGE 1 - REQUIRED INPUT:
- A customer must be chosen
- Receipts, invoices and quotations need at least one line item
- Any failure here is an error and blocks the document

STAGE 2 - SANITY CHECKS:
- Lines with zero quantity
- A zero or negative total
- These are warnings only; the document can still be produced

CRITICAL: The customer check always runs first, so a request with no
customer and no items reports the missing customer.
"""

from decimal import Decimal
from typing import Optional, Sequence

from lawdesk.models.document import (
    DocumentType,
    DraftItem,
    ValidationIssue,
    ValidationResult,
)


MSG_MISSING_CUSTOMER = "Sila pilih pelanggan!"
MSG_EMPTY_ITEMS = "Tambah sekurang-kurangnya 1 item!"


# =============================================================================
# EXCEPTIONS
# =============================================================================

class DocumentValidationError(Exception):
    """Base exception for rejected document requests."""

    def __init__(self, message: str, issues: Optional[list[ValidationIssue]] = None):
        super().__init__(message)
        self.message = message
        self.issues = issues or []


class MissingCustomerError(DocumentValidationError):
    """No customer name was given."""
    pass


class EmptyItemListError(DocumentValidationError):
    """A non-statement document was requested with no line items."""
    pass


ISSUE_ERRORS: dict[str, type[DocumentValidationError]] = {
    "missing_customer": MissingCustomerError,
    "empty_items": EmptyItemListError,
}


class DocumentValidator:
    """
    Validates a document request through a two-stage pipeline.

    Stage 1: Required input (errors)
    Stage 2: Sanity checks (warnings, only if stage 1 passes)
    """

    def _validate_required(
        self,
        doc_type: DocumentType,
        customer: str,
        items: Optional[Sequence[DraftItem]],
    ) -> list[ValidationIssue]:
        issues = []

        if not customer or not customer.strip():
            issues.append(ValidationIssue(
                field="customer",
                issue_type="missing_customer",
                message=MSG_MISSING_CUSTOMER,
                severity="error",
                suggested_fix="Choose a registered client or the cash customer",
            ))

        if doc_type.is_counter_based and not items:
            issues.append(ValidationIssue(
                field="items",
                issue_type="empty_items",
                message=MSG_EMPTY_ITEMS,
                severity="error",
                suggested_fix="Add a service from the price list or a custom line",
            ))

        return issues

    def _validate_sanity(
        self,
        items: Sequence[DraftItem],
    ) -> list[ValidationIssue]:
        issues = []

        for item in items:
            if item.quantity == 0:
                issues.append(ValidationIssue(
                    field="items",
                    issue_type="zero_quantity",
                    message=f"{item.name} has quantity 0 and adds nothing",
                    severity="warning",
                ))

        total = sum((item.line_amount for item in items), Decimal("0"))
        if items and total == 0:
            issues.append(ValidationIssue(
                field="total",
                issue_type="zero_total",
                message="Document total is 0.00",
                severity="warning",
            ))
        elif total < 0:
            issues.append(ValidationIssue(
                field="total",
                issue_type="negative_total",
                message=f"Document total is negative ({total:.2f})",
                severity="warning",
                suggested_fix="Check that credits were not entered twice",
            ))

        return issues

    def validate(
        self,
        doc_type: DocumentType,
        customer: str,
        items: Optional[Sequence[DraftItem]] = None,
    ) -> ValidationResult:
        """
        Run the validation pipeline.

        Args:
            doc_type: Kind of document requested
            customer: Customer/payer name as entered
            items: Draft line items (ignored for statements)

        Returns:
            ValidationResult with all issues found
        """
        issues = self._validate_required(doc_type, customer, items)

        if not any(issue.severity == "error" for issue in issues) and items:
            issues.extend(self._validate_sanity(items))

        return ValidationResult(doc_type=doc_type, issues=issues)

    def raise_for_errors(self, result: ValidationResult) -> None:
        """Raise the exception matching the first error issue, if any."""
        issue = result.first_error
        if issue is None:
            return
        error_class = ISSUE_ERRORS.get(issue.issue_type, DocumentValidationError)
        raise error_class(issue.message, issues=list(result.issues))

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a user-friendly summary of validation results.

        This is what we show next to the generate button.
        """
        warnings = [issue for issue in result.issues if issue.severity == "warning"]
        if result.is_valid and not warnings:
            return "✅ Sedia untuk dijana."

        lines = []

        if result.has_errors:
            lines.append("❌ Dokumen tidak dapat dijana:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Sila semak:")
            for issue in warnings:
                lines.append(f"   • {issue.message}")

        return "\n".join(lines)

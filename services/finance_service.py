"""
Finance Service - ledger transactions, accounts, budgets and financial reports.
"""

import logging
import re
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from database.models import Account, Budget, FinancialTransaction
from services.base import (
    BaseService, Field, assign_fields, body_must_be_object, db_operation, validate_fields
)
from services.results import (
    business_rule_error_result, not_found_result, success_result, validation_error_result
)
from validators import (
    FieldErrors, parse_bool, parse_iso_date, validate_choice, validate_integer,
    validate_iso_date, validate_number_range, validate_pattern, validate_string_length,
    validate_uuid
)

logger = logging.getLogger(__name__)

TRANSACTION_TYPES = ['income', 'expense']
TRANSACTION_STATUSES = ['pending', 'completed', 'cancelled']
ACCOUNT_TYPES = ['asset', 'liability', 'equity', 'revenue', 'expense']
CURRENCY_PATTERN = re.compile(r'^[A-Z]{3}$')

TRANSACTION_FIELDS = {
    'accountId': Field('account_id', validate_uuid),
    'type': Field('type', lambda v: validate_choice(v, TRANSACTION_TYPES), required=True),
    'amount': Field('amount', lambda v: validate_number_range(v, 0.01, 10_000_000), required=True),
    'category': Field('category', lambda v: validate_string_length(v, 1, 50), required=True),
    'description': Field('description', lambda v: validate_string_length(v, 0, 500)),
    'date': Field('date', validate_iso_date, parse=parse_iso_date, required=True),
    'status': Field('status', lambda v: validate_choice(v, TRANSACTION_STATUSES), nullable=False),
    'reference': Field('reference', lambda v: validate_string_length(v, 0, 100)),
}

ACCOUNT_FIELDS = {
    'name': Field('name', lambda v: validate_string_length(v, 1, 100), required=True),
    'type': Field('type', lambda v: validate_choice(v, ACCOUNT_TYPES), required=True),
    'number': Field('number', lambda v: validate_string_length(v, 0, 20)),
    'description': Field('description', lambda v: validate_string_length(v, 0, 500)),
    'balance': Field('balance', validate_number_range, nullable=False),
    'currency': Field('currency', lambda v: validate_pattern(v, CURRENCY_PATTERN, "Currency must be a 3-letter ISO code"), nullable=False),
    'isActive': Field('is_active', lambda v: (isinstance(v, bool), "isActive must be a boolean"), nullable=False),
}

BUDGET_FIELDS = {
    'name': Field('name', lambda v: validate_string_length(v, 1, 100), required=True),
    'category': Field('category', lambda v: validate_string_length(v, 1, 50), required=True),
    'amount': Field('amount', lambda v: validate_number_range(v, 0.01), required=True),
    'spent': Field('spent', lambda v: validate_number_range(v, 0), nullable=False),
    'periodStart': Field('period_start', validate_iso_date, parse=parse_iso_date, required=True),
    'periodEnd': Field('period_end', validate_iso_date, parse=parse_iso_date, required=True),
    'alertThreshold': Field('alert_threshold', lambda v: validate_integer(v, 1, 100), nullable=False),
    'isActive': Field('is_active', lambda v: (isinstance(v, bool), "isActive must be a boolean"), nullable=False),
    'notes': Field('notes', lambda v: validate_string_length(v, 0, 1000)),
}


def _report(report_type, period_start, period_end, data, summary):
    return {
        'type': report_type,
        'periodStart': period_start.isoformat() if period_start else None,
        'periodEnd': period_end.isoformat() if period_end else None,
        'generatedAt': datetime.now(timezone.utc).isoformat(),
        'data': data,
        'summary': summary,
    }


def _parse_period(date_from: Optional[str], date_to: Optional[str], require_end: bool = True):
    """Validate report dates. Returns (start, end, errors)."""
    errors = FieldErrors()
    start = parse_iso_date(date_from)
    end = parse_iso_date(date_to) if date_to else None
    if not date_from:
        errors.add('dateFrom', 'dateFrom is required', 'required')
    elif start is None:
        errors.check('dateFrom', validate_iso_date(date_from))
    if require_end:
        if not date_to:
            errors.add('dateTo', 'dateTo is required', 'required')
        elif end is None:
            errors.check('dateTo', validate_iso_date(date_to))
    if start and end and end < start:
        errors.add('dateTo', 'dateTo must not be before dateFrom', 'invalid')
    return start, end, errors


class FinanceService(BaseService):
    """Ledger, chart of accounts, budgets and reporting."""

    source = 'finances'

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @db_operation
    def list_transactions(self, query: Dict[str, Any]):
        errors = FieldErrors()
        for key in ('dateFrom', 'dateTo'):
            if query.get(key):
                errors.check(key, validate_iso_date(query[key]))
        if errors:
            return validation_error_result(errors.as_list())

        with self._session() as session:
            q = session.query(FinancialTransaction)
            if not parse_bool(query.get('includeInactive')):
                q = q.filter(FinancialTransaction.is_active == True)  # noqa: E712
            for key, column in (('type', FinancialTransaction.type),
                                ('category', FinancialTransaction.category),
                                ('status', FinancialTransaction.status),
                                ('accountId', FinancialTransaction.account_id)):
                if query.get(key):
                    q = q.filter(column == query[key])
            if query.get('dateFrom'):
                q = q.filter(FinancialTransaction.date >= parse_iso_date(query['dateFrom']))
            if query.get('dateTo'):
                q = q.filter(FinancialTransaction.date <= parse_iso_date(query['dateTo']))
            q = q.order_by(FinancialTransaction.date.desc(), FinancialTransaction.created_at.desc())
            return self._paged_result(q, query)

    @db_operation
    def create_transaction(self, data: Dict[str, Any]):
        """Record a ledger line, post it to its account and count expenses against budgets."""
        invalid = body_must_be_object(data)
        if invalid:
            return invalid
        errors = validate_fields(data, TRANSACTION_FIELDS)
        if errors:
            return validation_error_result(errors.as_list())

        with self._session() as session:
            account = None
            if data.get('accountId'):
                account = session.get(Account, data['accountId'])
                if not account:
                    return not_found_result('Account')
                if not account.is_active:
                    return business_rule_error_result('inactive-account', 'Account is inactive')

            transaction = FinancialTransaction(status='completed', is_active=True)
            assign_fields(transaction, data, TRANSACTION_FIELDS)
            session.add(transaction)

            if transaction.status == 'completed':
                signed = transaction.amount if transaction.type == 'income' else -transaction.amount
                if account:
                    account.balance = round((account.balance or 0) + signed, 2)
                if transaction.type == 'expense':
                    budgets = session.query(Budget).filter(
                        Budget.is_active == True,  # noqa: E712
                        Budget.category == transaction.category,
                        Budget.period_start <= transaction.date,
                        Budget.period_end >= transaction.date
                    ).all()
                    for budget in budgets:
                        budget.spent = round((budget.spent or 0) + transaction.amount, 2)
                        if budget.spent >= budget.amount * budget.alert_threshold / 100:
                            logger.warning(
                                f"Budget '{budget.name}' at {budget.spent / budget.amount:.0%} of {budget.amount}"
                            )

            session.flush()
            logger.info(f"Created {transaction.type} transaction: {transaction.id} ({transaction.amount})")
            return success_result(transaction.to_dict(), source=self.source)

    # ------------------------------------------------------------------
    # Accounts & budgets
    # ------------------------------------------------------------------

    @db_operation
    def list_accounts(self):
        with self._session() as session:
            accounts = session.query(Account).order_by(Account.name).all()
            return success_result([a.to_dict() for a in accounts], source=self.source)

    @db_operation
    def create_account(self, data: Dict[str, Any]):
        invalid = body_must_be_object(data)
        if invalid:
            return invalid
        errors = validate_fields(data, ACCOUNT_FIELDS)
        if errors:
            return validation_error_result(errors.as_list())

        with self._session() as session:
            if data.get('number') and session.query(Account).filter(Account.number == data['number']).first():
                return business_rule_error_result('unique-account-number', f"Account number {data['number']} already exists")
            account = Account(balance=0, currency='USD', is_active=True)
            assign_fields(account, data, ACCOUNT_FIELDS)
            session.add(account)
            session.flush()
            logger.info(f"Created account: {account.id}")
            return success_result(account.to_dict(), source=self.source)

    @db_operation
    def list_budgets(self):
        with self._session() as session:
            budgets = session.query(Budget).order_by(Budget.period_start.desc()).all()
            return success_result([b.to_dict() for b in budgets], source=self.source)

    @db_operation
    def create_budget(self, data: Dict[str, Any]):
        invalid = body_must_be_object(data)
        if invalid:
            return invalid
        errors = validate_fields(data, BUDGET_FIELDS)
        if not errors and parse_iso_date(data['periodEnd']) <= parse_iso_date(data['periodStart']):
            errors.add('periodEnd', 'Period end must be after period start', 'invalid')
        if errors:
            return validation_error_result(errors.as_list())

        with self._session() as session:
            budget = Budget(spent=0, alert_threshold=80, is_active=True)
            assign_fields(budget, data, BUDGET_FIELDS)
            session.add(budget)
            session.flush()
            logger.info(f"Created budget: {budget.id}")
            return success_result(budget.to_dict(), source=self.source)

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def _completed_transactions(self, session, start, end):
        q = session.query(FinancialTransaction).filter(
            FinancialTransaction.is_active == True,  # noqa: E712
            FinancialTransaction.status == 'completed'
        )
        if start:
            q = q.filter(FinancialTransaction.date >= start)
        if end:
            q = q.filter(FinancialTransaction.date <= end)
        return q.order_by(FinancialTransaction.date).all()

    @db_operation
    def profit_loss_report(self, date_from: Optional[str], date_to: Optional[str]):
        start, end, errors = _parse_period(date_from, date_to)
        if errors:
            return validation_error_result(errors.as_list())

        with self._session() as session:
            revenue_by_category = defaultdict(float)
            expenses_by_category = defaultdict(float)
            for t in self._completed_transactions(session, start, end):
                target = revenue_by_category if t.type == 'income' else expenses_by_category
                target[t.category] += t.amount

        total_revenue = round(sum(revenue_by_category.values()), 2)
        total_expenses = round(sum(expenses_by_category.values()), 2)
        net_income = round(total_revenue - total_expenses, 2)
        gross_margin = round(net_income / total_revenue * 100, 2) if total_revenue else 0

        report = _report(
            'profit_loss', start, end,
            {
                'revenue': {k: round(v, 2) for k, v in sorted(revenue_by_category.items())},
                'expenses': {k: round(v, 2) for k, v in sorted(expenses_by_category.items())},
            },
            {
                'totalRevenue': total_revenue,
                'totalExpenses': total_expenses,
                'netIncome': net_income,
                'grossMargin': gross_margin,
            }
        )
        return success_result(report, source='reporting')

    @db_operation
    def balance_sheet_report(self, as_of: Optional[str]):
        start, _, errors = _parse_period(as_of, None, require_end=False)
        if errors:
            return validation_error_result(errors.as_list())

        with self._session() as session:
            totals = defaultdict(float)
            accounts = session.query(Account).filter(Account.is_active == True).all()  # noqa: E712
            for account in accounts:
                totals[account.type] += account.balance or 0
            retained = sum(
                t.amount if t.type == 'income' else -t.amount
                for t in self._completed_transactions(session, None, start)
            )

        assets = round(totals['asset'], 2)
        liabilities = round(totals['liability'], 2)
        equity = round(totals['equity'] + retained, 2)
        report = _report(
            'balance_sheet', start, start,
            {
                'assets': assets,
                'liabilities': liabilities,
                'equity': equity,
                'retainedEarnings': round(retained, 2),
                'accounts': len(accounts),
            },
            {
                'totalAssets': assets,
                'totalLiabilities': liabilities,
                'totalEquity': equity,
                'netWorth': round(assets - liabilities, 2),
            }
        )
        return success_result(report, source='reporting')

    @db_operation
    def cash_flow_report(self, date_from: Optional[str], date_to: Optional[str]):
        start, end, errors = _parse_period(date_from, date_to)
        if errors:
            return validation_error_result(errors.as_list())

        with self._session() as session:
            daily = defaultdict(lambda: {'inflow': 0.0, 'outflow': 0.0})
            for t in self._completed_transactions(session, start, end):
                bucket = daily[t.date.isoformat()]
                bucket['inflow' if t.type == 'income' else 'outflow'] += t.amount

        series = [
            {
                'date': day,
                'inflow': round(values['inflow'], 2),
                'outflow': round(values['outflow'], 2),
                'net': round(values['inflow'] - values['outflow'], 2),
            }
            for day, values in sorted(daily.items())
        ]
        inflows = round(sum(d['inflow'] for d in series), 2)
        outflows = round(sum(d['outflow'] for d in series), 2)
        report = _report(
            'cash_flow', start, end,
            {'daily': series},
            {
                'totalInflows': inflows,
                'totalOutflows': outflows,
                'netCashFlow': round(inflows - outflows, 2),
            }
        )
        return success_result(report, source='reporting')

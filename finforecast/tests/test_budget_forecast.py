import unittest
from decimal import Decimal

from finforecast.budget_forecast import (
    MAX_AMOUNT,
    ExpenseEntry,
    ForecastValidationError,
    MoneyAmount,
    SavingsGoal,
    calculate_forecast,
    coerce_amount,
    parse_savings_goal,
)
from finforecast.expense_entries import add_expense, remove_expense, update_expense
from finforecast.frequency import Frequency

CENT = Decimal("0.01")


class BudgetForecastTests(unittest.TestCase):
    def test_monthly_income_with_two_monthly_expenses(self) -> None:
        forecast = calculate_forecast(
            MoneyAmount(amount=Decimal("4000"), frequency=Frequency.MONTHLY),
            [
                ExpenseEntry(category="Housing", amount=Decimal("1200"), frequency=Frequency.MONTHLY),
                ExpenseEntry(category="Food", amount=Decimal("400"), frequency=Frequency.MONTHLY),
            ],
            SavingsGoal.MODERATE,
        )

        self.assertEqual(forecast.monthly_income, Decimal("4000"))
        self.assertEqual(forecast.monthly_expenses, Decimal("1600"))
        self.assertEqual(forecast.monthly_savings, Decimal("800"))
        self.assertEqual(forecast.monthly_spendable, Decimal("1600"))
        self.assertEqual(forecast.weekly_spendable.quantize(CENT), Decimal("368.24"))
        self.assertEqual(forecast.daily_spendable.quantize(CENT), Decimal("53.33"))
        self.assertEqual(forecast.yearly_savings, Decimal("9600"))
        self.assertFalse(forecast.is_overspending)

    def test_weekly_income_without_expenses(self) -> None:
        forecast = calculate_forecast(
            MoneyAmount(amount=Decimal("1000"), frequency=Frequency.WEEKLY),
            [],
            SavingsGoal.LIGHT,
        )

        self.assertEqual(forecast.monthly_income, Decimal("4345"))
        self.assertEqual(forecast.monthly_savings, Decimal("434.5"))
        self.assertEqual(forecast.monthly_spendable, Decimal("3910.5"))

    def test_savings_is_goal_rate_of_income_when_no_expenses(self) -> None:
        income = MoneyAmount(amount=Decimal("2500"), frequency=Frequency.BIWEEKLY)
        monthly_income = Decimal("2500") * Decimal("2.1725")
        for goal in SavingsGoal:
            with self.subTest(goal=goal):
                forecast = calculate_forecast(income, [], goal)
                self.assertEqual(forecast.monthly_savings, monthly_income * goal.rate)
                self.assertEqual(
                    forecast.monthly_spendable,
                    monthly_income - forecast.monthly_savings,
                )

    def test_skips_unusable_expense_rows(self) -> None:
        expenses = [
            ExpenseEntry(category="Blank", amount=""),
            ExpenseEntry(category="Typo", amount="abc"),
            ExpenseEntry(category="Zero", amount=Decimal("0")),
            ExpenseEntry(category="Negative", amount=Decimal("-5")),
            ExpenseEntry(category="Missing", amount=None),
            ExpenseEntry(category="NaN", amount=Decimal("NaN")),
            ExpenseEntry(category="Infinite", amount="Infinity"),
            ExpenseEntry(category="Huge", amount="1e27"),
            ExpenseEntry(category="Gym", amount="250", frequency=Frequency.MONTHLY),
        ]

        forecast = calculate_forecast(
            MoneyAmount(amount="3000", frequency=Frequency.MONTHLY),
            expenses,
            SavingsGoal.LIGHT,
        )

        self.assertEqual(forecast.monthly_expenses, Decimal("250"))
        self.assertEqual(forecast.monthly_spendable, Decimal("2450"))

    def test_overspending_is_reported_as_negative_spendable(self) -> None:
        forecast = calculate_forecast(
            MoneyAmount(amount=Decimal("1000"), frequency=Frequency.MONTHLY),
            [ExpenseEntry(category="Rent", amount=Decimal("1000"))],
            SavingsGoal.MODERATE,
        )

        self.assertEqual(forecast.monthly_spendable, Decimal("-200"))
        self.assertTrue(forecast.is_overspending)
        self.assertLess(forecast.daily_spendable, Decimal("0"))

    def test_rejects_unusable_income(self) -> None:
        for amount in ("abc", "", None, Decimal("0"), Decimal("-1"), "NaN", "Infinity", "1e27"):
            with self.subTest(amount=amount):
                with self.assertRaises(ForecastValidationError):
                    calculate_forecast(
                        MoneyAmount(amount=amount, frequency=Frequency.MONTHLY),
                        [],
                        SavingsGoal.MODERATE,
                    )

    def test_accepts_income_up_to_the_largest_amount(self) -> None:
        forecast = calculate_forecast(
            MoneyAmount(amount=MAX_AMOUNT, frequency=Frequency.MONTHLY),
            [],
            SavingsGoal.MODERATE,
        )

        self.assertEqual(forecast.monthly_income, MAX_AMOUNT)
        with self.assertRaises(ForecastValidationError):
            calculate_forecast(
                MoneyAmount(amount=MAX_AMOUNT + 1, frequency=Frequency.MONTHLY),
                [],
                SavingsGoal.MODERATE,
            )

    def test_validation_error_is_a_value_error(self) -> None:
        self.assertTrue(issubclass(ForecastValidationError, ValueError))

    def test_recalculation_is_idempotent(self) -> None:
        income = MoneyAmount(amount=Decimal("1834.17"), frequency=Frequency.BIWEEKLY)
        expenses = [
            ExpenseEntry(category="Transit", amount=Decimal("12.5"), frequency=Frequency.DAILY),
            ExpenseEntry(category="Insurance", amount=Decimal("1490"), frequency=Frequency.YEARLY),
        ]

        first = calculate_forecast(income, expenses, SavingsGoal.AGGRESSIVE)
        second = calculate_forecast(income, expenses, SavingsGoal.AGGRESSIVE)

        self.assertEqual(first, second)

    def test_savings_goal_parsing(self) -> None:
        self.assertIs(parse_savings_goal("Aggressive"), SavingsGoal.AGGRESSIVE)
        self.assertEqual(SavingsGoal.MODERATE.rate, Decimal("0.20"))
        with self.assertRaises(ValueError):
            parse_savings_goal("extreme")

    def test_coerce_amount_handles_form_text(self) -> None:
        self.assertEqual(coerce_amount(" 1,250.50 "), Decimal("1250.50"))
        self.assertEqual(coerce_amount(12.5), Decimal("12.5"))
        self.assertIsNone(coerce_amount("twelve"))
        self.assertIsNone(coerce_amount(True))


class ExpenseEntryEditTests(unittest.TestCase):
    def test_add_update_and_remove_return_new_lists(self) -> None:
        entries = add_expense([], "Rent", "1500")
        entries = add_expense(entries, "Coffee", Decimal("4"), "Daily")

        edited = update_expense(entries, 1, amount="oops")
        self.assertEqual(len(edited), 2)
        self.assertEqual(edited[1].amount, "oops")
        self.assertEqual(entries[1].amount, Decimal("4"))

        renamed = update_expense(edited, 0, category=" Mortgage ", frequency="bi-weekly")
        self.assertEqual(renamed[0].category, "Mortgage")
        self.assertIs(renamed[0].frequency, Frequency.BIWEEKLY)
        self.assertEqual(renamed[0].amount, "1500")

        remaining = remove_expense(renamed, 0)
        self.assertEqual([entry.category for entry in remaining], ["Coffee"])
        self.assertEqual(len(renamed), 2)

    def test_soft_invalid_rows_stay_but_do_not_count(self) -> None:
        entries = add_expense([], "Rent", "1000")
        entries = add_expense(entries, "Pending", "")

        forecast = calculate_forecast(
            MoneyAmount(amount="2000", frequency=Frequency.MONTHLY),
            entries,
            SavingsGoal.LIGHT,
        )

        self.assertEqual(len(entries), 2)
        self.assertEqual(forecast.monthly_expenses, Decimal("1000"))

    def test_rejects_blank_category_and_bad_position(self) -> None:
        with self.assertRaises(ValueError):
            add_expense([], "   ", "10")
        entries = add_expense([], "Rent", "10")
        with self.assertRaises(IndexError):
            update_expense(entries, 3, amount="5")
        with self.assertRaises(IndexError):
            remove_expense(entries, -1)
        with self.assertRaises(ValueError):
            update_expense(entries, 0, frequency="hourly")


if __name__ == "__main__":
    unittest.main()

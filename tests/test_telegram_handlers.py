import unittest
from types import SimpleNamespace
from unittest import mock

from application.services import add_player, reset_all
from domain.ledger import SettlementLedger
from domain.repositories import ExportWriter
from interfaces.telegram.callback_data import (
    encode_remove_confirmation,
    encode_reset_confirmation,
)
from interfaces.telegram.handlers import create_telegram_bot


class NullExportWriter(ExportWriter):
    def write_export(self, filename, record) -> str:
        return filename


class TelegramCallbackTests(unittest.TestCase):
    def setUp(self) -> None:
        self.ledger = SettlementLedger()
        self.bot = create_telegram_bot("123456:TEST-token", self.ledger, NullExportWriter())
        self.bot.send_message = mock.Mock()
        self.bot.answer_callback_query = mock.Mock()
        self.bot.delete_message = mock.Mock()

    def _press(self, data: str) -> None:
        call = SimpleNamespace(
            id="cb-1",
            data=data,
            message=SimpleNamespace(chat=SimpleNamespace(id=1), id=2),
        )
        for handler in self.bot.callback_query_handlers:
            if handler["filters"]["func"](call):
                handler["function"](call)
                return
        self.fail(f"no callback handler for {data!r}")

    def test_confirmed_remove_answers_callback(self):
        add_player(self.ledger, "Alice")

        self._press(encode_remove_confirmation(1, "Alice", accepted=True))

        self.assertTrue(self.ledger.is_empty)
        self.bot.answer_callback_query.assert_called_once_with("cb-1", "Removed.")
        self.bot.delete_message.assert_called_once_with(1, 2)

    def test_stale_remove_prompt_keeps_new_player(self):
        add_player(self.ledger, "Alice")
        data = encode_remove_confirmation(1, "Alice", accepted=True)
        reset_all(self.ledger)
        add_player(self.ledger, "Carl")

        self._press(data)

        self.assertEqual([p.name for p in self.ledger.players], ["Carl"])
        self.bot.answer_callback_query.assert_called_once()
        self.assertIn("Carl", self.bot.send_message.call_args[0][1])
        self.bot.delete_message.assert_called_once_with(1, 2)

    def test_declined_remove_answers_callback(self):
        add_player(self.ledger, "Alice")

        self._press(encode_remove_confirmation(1, "Alice", accepted=False))

        self.assertEqual(len(self.ledger), 1)
        self.bot.answer_callback_query.assert_called_once_with("cb-1", "Cancelled.")

    def test_confirmed_reset_answers_callback(self):
        add_player(self.ledger, "Alice")

        self._press(encode_reset_confirmation(accepted=True))

        self.assertTrue(self.ledger.is_empty)
        self.bot.answer_callback_query.assert_called_once_with("cb-1", "All players cleared.")
        self.bot.send_message.assert_called_once_with(1, "All players cleared.")

    def test_malformed_callback_is_answered(self):
        self._press("rm:yes:oops:00000000")

        self.bot.answer_callback_query.assert_called_once_with("cb-1", "Invalid confirmation.")
        self.bot.delete_message.assert_not_called()


if __name__ == "__main__":
    unittest.main()

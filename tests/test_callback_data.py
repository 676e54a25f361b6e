import unittest

from interfaces.telegram.callback_data import (
    encode_remove_confirmation,
    encode_reset_confirmation,
    name_tag,
    parse_remove_confirmation,
    parse_reset_confirmation,
)


class CallbackDataTests(unittest.TestCase):
    def test_remove_confirmation(self):
        data = encode_remove_confirmation(3, "Alice", accepted=True)
        self.assertEqual(data, f"rm:yes:3:{name_tag('Alice')}")
        self.assertEqual(parse_remove_confirmation(data), (True, 3, name_tag("Alice")))

        declined = encode_remove_confirmation(4, "Bob", accepted=False)
        self.assertEqual(parse_remove_confirmation(declined), (False, 4, name_tag("Bob")))

    def test_remove_confirmation_tells_reused_ids_apart(self):
        _, player_id, tag = parse_remove_confirmation(
            encode_remove_confirmation(1, "Alice", accepted=True)
        )
        self.assertEqual(player_id, 1)
        self.assertEqual(tag, name_tag("Alice"))
        self.assertNotEqual(tag, name_tag("Carl"))

    def test_remove_confirmation_fits_telegram_limit(self):
        data = encode_remove_confirmation(10**9, "A" * 500 + ":ü", accepted=False)
        self.assertLessEqual(len(data.encode("utf-8")), 64)
        self.assertEqual(parse_remove_confirmation(data)[1], 10**9)

    def test_reset_confirmation(self):
        self.assertEqual(encode_reset_confirmation(accepted=True), "reset:yes")
        self.assertTrue(parse_reset_confirmation("reset:yes"))
        self.assertFalse(parse_reset_confirmation("reset:no"))

    def test_malformed_data_raises(self):
        for data in ("rm:maybe:1:00000000", "rm:yes:1", "rm:yes:x:00000000", "rm:yes:1:", "from:1:to:2:5"):
            with self.subTest(data=data):
                with self.assertRaises(ValueError):
                    parse_remove_confirmation(data)

        for data in ("reset", "reset:yes:1", "reset:ok"):
            with self.subTest(data=data):
                with self.assertRaises(ValueError):
                    parse_reset_confirmation(data)


if __name__ == "__main__":
    unittest.main()

import io
import os
import shutil
import tempfile

from django.core.cache import cache
from django.test import override_settings
from django.urls import reverse
from PIL import Image
from rest_framework.test import APITestCase

from quotevault.models import ActivityRecord, Franchise, Question


def write_png(path, size=(120, 80)):
    img = Image.new("RGB", size)
    img.putdata([((x * 2) % 256, (y * 3) % 256, 90) for y in range(size[1]) for x in range(size[0])])
    img.save(path, format="PNG")
    with open(path, "rb") as fh:
        return fh.read()


class GameFlowTests(APITestCase):
    def setUp(self):
        self.media = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.media)
        os.makedirs(os.path.join(self.media, "uploads"))
        self.portrait_bytes = write_png(os.path.join(self.media, "uploads", "walter.png"))
        write_png(os.path.join(self.media, "uploads", "banner.png"))

        override = override_settings(QUOTEVAULT={"MEDIA_ROOT": self.media, "RENDER_FORMAT": "PNG"})
        override.enable()
        self.addCleanup(override.disable)
        cache.clear()

        self.franchise = Franchise.objects.create(title="Breaking Bad", category="series")
        self.quote = Question.objects.create(
            franchise=self.franchise, kind="quote", media_path="uploads/clip.mp4",
            answer="Say my name", stop_time=12.5,
        )
        self.character = Question.objects.create(
            franchise=self.franchise, kind="character", media_path="uploads/walter.png",
            answer="Walter White", base_clarity=0.02,
        )
        self.banner = Question.objects.create(
            franchise=self.franchise, kind="banner", media_path="uploads/banner.png",
            answer="Breaking Bad", base_clarity=0.3,
        )

    def _url(self, name, question):
        return reverse(name, kwargs={"question_id": question.pk})

    def _hint(self, question, times=1):
        resp = None
        for _ in range(times):
            resp = self.client.post(self._url("question-hint", question), format="json")
            self.assertEqual(resp.status_code, 200)
        return resp.json()

    def test_health(self):
        resp = self.client.get(reverse("Health"))
        self.assertEqual(resp.status_code, 200)

    def test_random_content_serves_one_question_per_kind(self):
        resp = self.client.get(reverse("random-content"), {"category": "series"})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["title"], "Breaking Bad")
        self.assertEqual(set(data["questions"]), {"quote", "character", "banner"})
        self.assertEqual(data["questions"]["quote"]["stop_time"], 12.5)
        self.assertIsNone(data["questions"]["quote"]["image_url"])
        self.assertEqual(data["questions"]["character"]["disclosure"]["mode"], "image")
        self.assertNotIn("Walter White", resp.content.decode())

    def test_random_content_resets_progress(self):
        self.client.post(self._url("question-guess", self.quote), {"guess": "nope"}, format="json")
        self.client.get(reverse("random-content"), {"category": "series"})
        resp = self.client.get(self._url("question-progress", self.quote))
        self.assertEqual(resp.json()["attempts"], 0)

    def test_random_content_empty_category(self):
        resp = self.client.get(reverse("random-content"), {"category": "game"})
        self.assertEqual(resp.status_code, 404)

    def test_miscalibrated_question_is_reported(self):
        broken = Franchise.objects.create(title="Tron", category="game")
        banner = Question.objects.create(
            franchise=broken, kind="banner", media_path="uploads/banner.png", answer="Tron", base_clarity=1.5,
        )
        resp = self.client.get(reverse("random-content"), {"category": "game"})
        self.assertEqual(resp.status_code, 422)
        self.assertIn("error", resp.json())

        for name in ("question-hint", "question-skip"):
            resp = self.client.post(self._url(name, banner), format="json")
            self.assertEqual(resp.status_code, 422, name)
        resp = self.client.get(self._url("question-progress", banner))
        self.assertEqual(resp.status_code, 422)

    def test_guess_and_solve(self):
        resp = self.client.post(self._url("question-guess", self.quote), {"guess": "say my name!"}, format="json")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertTrue(data["correct"])
        self.assertEqual(data["canonical_answer"], "Say my name")
        self.assertEqual(data["progress"]["status"], "SOLVED")
        self.assertEqual(data["progress"]["score"], 100)
        record = ActivityRecord.objects.get()
        self.assertEqual((record.question_id, record.attempts, record.hints_used), (self.quote.pk, 1, 0))
        self.assertIsNone(record.user)

        again = self.client.post(self._url("question-guess", self.quote), {"guess": "say my name"}, format="json")
        self.assertEqual(again.status_code, 409)

    def test_wrong_guess(self):
        resp = self.client.post(self._url("question-guess", self.character), {"guess": "Jesse"}, format="json")
        data = resp.json()
        self.assertFalse(data["correct"])
        self.assertIsNone(data["canonical_answer"])
        self.assertEqual(data["progress"]["attempts"], 1)
        self.assertIsNone(data["progress"]["canonical_answer"])
        self.assertFalse(ActivityRecord.objects.exists())

    def test_blank_guess_rejected_without_attempt(self):
        resp = self.client.post(self._url("question-guess", self.quote), {"guess": "   "}, format="json")
        self.assertEqual(resp.status_code, 400)
        progress = self.client.get(self._url("question-progress", self.quote)).json()
        self.assertEqual(progress["attempts"], 0)

    def test_auto_hint_after_wrong_guesses(self):
        for _ in range(3):
            resp = self.client.post(self._url("question-guess", self.character), {"guess": "Jesse"}, format="json")
        data = resp.json()
        self.assertTrue(data["auto_hint"])
        self.assertEqual(data["progress"]["hints_used"], 1)
        self.assertAlmostEqual(data["progress"]["disclosure"]["clarity_level"], 0.17)

    def test_unknown_question(self):
        resp = self.client.post(reverse("question-guess", kwargs={"question_id": 9999}), {"guess": "x"}, format="json")
        self.assertEqual(resp.status_code, 404)

    def test_quote_hint_unlocks_puzzle(self):
        before = self.client.get(self._url("question-puzzle", self.quote))
        self.assertEqual(before.status_code, 409)

        data = self._hint(self.quote)
        self.assertTrue(data["granted"])
        self.assertEqual(data["progress"]["disclosure"]["mode"], "puzzle")
        self.assertEqual(data["progress"]["disclosure"]["tier"], 1)

        puzzle = self.client.get(self._url("question-puzzle", self.quote)).json()
        self.assertEqual(puzzle["tier"], 1)
        self.assertEqual([len(g) for g in puzzle["groups"]], [3, 2, 4])

    def test_quote_hint_ceiling(self):
        self._hint(self.quote, times=4)
        data = self._hint(self.quote, times=2)
        self.assertFalse(data["granted"])
        self.assertEqual(data["progress"]["hints_used"], 4)
        self.assertFalse(data["progress"]["disclosure"]["hint_available"])

    def test_image_hints_reach_puzzle(self):
        data = self._hint(self.character, times=7)
        self.assertTrue(data["progress"]["disclosure"]["revealed"])
        self.assertEqual(data["progress"]["disclosure"]["mode"], "image")
        data = self._hint(self.character)
        self.assertEqual(data["progress"]["disclosure"]["mode"], "puzzle")
        data = self._hint(self.character)
        self.assertFalse(data["granted"])
        self.assertEqual(data["progress"]["hints_used"], 8)

    def test_explicit_tier_puzzle(self):
        resp = self.client.get(self._url("question-puzzle", self.character), {"tier": 4})
        self.assertEqual(resp.status_code, 200)
        walter, white = resp.json()["groups"]
        self.assertTrue(walter[0]["locked"] and walter[-1]["locked"])
        self.assertEqual(walter[0]["letter"], "W")
        self.assertEqual(white[-1]["letter"], "e")

    def test_explicit_tier_out_of_range(self):
        resp = self.client.get(self._url("question-puzzle", self.character), {"tier": 7})
        self.assertEqual(resp.status_code, 400)

    def test_swap_tiles(self):
        self._hint(self.quote, times=3)
        puzzle = self.client.get(self._url("question-puzzle", self.quote)).json()
        tiles = [t for group in puzzle["groups"] for t in group]
        locked = [t for t in tiles if t["locked"]]
        unlocked = [t for t in tiles if not t["locked"]]

        refused = self.client.post(
            self._url("question-puzzle-swap", self.quote),
            {"source": unlocked[0]["id"], "target": locked[0]["id"]},
            format="json",
        )
        self.assertEqual(refused.status_code, 400)

        source, target = unlocked[0], unlocked[-1]
        resp = self.client.post(
            self._url("question-puzzle-swap", self.quote),
            {"source": source["id"], "target": target["id"]},
            format="json",
        )
        self.assertEqual(resp.status_code, 200)
        ids = [t["id"] for group in resp.json()["groups"] for t in group]
        before = [t["id"] for t in tiles]
        self.assertEqual(ids[before.index(source["id"])], target["id"])
        self.assertEqual(ids[before.index(target["id"])], source["id"])

        unknown = self.client.post(
            self._url("question-puzzle-swap", self.quote), {"source": 500, "target": 501}, format="json"
        )
        self.assertEqual(unknown.status_code, 400)

    def test_submit_puzzle(self):
        up = Question.objects.create(franchise=self.franchise, kind="quote", media_path="uploads/up.mp4", answer="Up")
        missing = self.client.post(self._url("question-puzzle-submit", up), format="json")
        self.assertEqual(missing.status_code, 409)

        self._hint(up, times=4)
        resp = self.client.post(self._url("question-puzzle-submit", up), format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["correct"])
        self.assertEqual(resp.json()["canonical_answer"], "Up")

    def test_skip(self):
        resp = self.client.post(self._url("question-skip", self.banner), format="json")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["status"], "SKIPPED")
        self.assertEqual(data["canonical_answer"], "Breaking Bad")
        self.assertEqual(data["score"], 0)
        self.assertFalse(ActivityRecord.objects.exists())

        hint = self._hint(self.banner)
        self.assertFalse(hint["granted"])

    def test_image_full_reveal_is_original(self):
        resp = self.client.get(self._url("question-image", self.character), {"level": "1.0"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp["Content-Type"], "image/png")
        self.assertEqual(resp.content, self.portrait_bytes)

    def test_image_pixelated(self):
        resp = self.client.get(self._url("question-image", self.character), {"level": "0.2"})
        self.assertEqual(resp.status_code, 200)
        self.assertNotEqual(resp.content, self.portrait_bytes)
        with Image.open(io.BytesIO(resp.content)) as img:
            self.assertEqual(img.size, (120, 80))

    def test_image_defaults_to_player_hints(self):
        self._hint(self.character, times=7)
        resp = self.client.get(self._url("question-image", self.character))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.content, self.portrait_bytes)

    def test_image_hint_parameter(self):
        resp = self.client.get(self._url("question-image", self.banner), {"hint": "1"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp["Content-Type"], "image/png")
        self.assertNotEqual(resp.content, self.portrait_bytes)

        full = self.client.get(self._url("question-image", self.banner), {"hint": "5"})
        self.assertEqual(full.content, self.portrait_bytes)

    def test_image_invalid_level(self):
        for level in ("-0.5", "1.5", "abc"):
            resp = self.client.get(self._url("question-image", self.character), {"level": level})
            self.assertEqual(resp.status_code, 400, level)

    def test_image_missing_asset(self):
        ghost = Question.objects.create(
            franchise=self.franchise, kind="banner", media_path="uploads/gone.png", answer="Gone"
        )
        resp = self.client.get(self._url("question-image", ghost), {"level": "0.5"})
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["error"], "Image unavailable.")

    def test_image_path_outside_media_root(self):
        sneaky = Question.objects.create(
            franchise=self.franchise, kind="banner", media_path="../../etc/passwd", answer="Nope"
        )
        resp = self.client.get(self._url("question-image", sneaky), {"level": "0.5"})
        self.assertEqual(resp.status_code, 404)

    def test_quote_has_no_image(self):
        resp = self.client.get(self._url("question-image", self.quote))
        self.assertEqual(resp.status_code, 400)

    def test_check_answer_stateless(self):
        payload = {"question_id": self.banner.pk, "guess": "breaking-bad", "attempts": 3, "hints_used": 2, "time_taken": 40}
        resp = self.client.post(reverse("check-answer"), payload, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"correct": True, "canonical_answer": "Breaking Bad"})
        record = ActivityRecord.objects.get()
        self.assertEqual((record.attempts, record.hints_used, record.time_taken), (3, 2, 40))

        wrong = self.client.post(reverse("check-answer"), {"question_id": self.banner.pk, "guess": "Better Call Saul"}, format="json")
        self.assertEqual(wrong.json(), {"correct": False, "canonical_answer": None})
        self.assertEqual(ActivityRecord.objects.count(), 1)

        missing = self.client.post(reverse("check-answer"), {"question_id": 9999, "guess": "x"}, format="json")
        self.assertEqual(missing.status_code, 404)

    def test_meta_lists(self):
        self.assertEqual(self.client.get(reverse("get-kinds")).json(), ["banner", "character", "quote"])
        self.assertEqual(self.client.get(reverse("get-categories")).json(), ["movie", "series", "game"])

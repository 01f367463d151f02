"""
파서 규칙 레지스트리 테스트.
"""

import os
import sys
import threading
import unittest

TEST_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(TEST_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from core.models import FieldOrder, ParserRule
from services.rule_registry import RuleRegistry


class TestRuleRegistry(unittest.TestCase):
    def setUp(self):
        self.registry = RuleRegistry([
            ParserRule("com.tencent.qqmusic", custom_name="QQ Music"),
            ParserRule("com.netease.cloudmusic", separator_pattern=" - ", enabled=False),
        ])

    def test_lookup_configured(self):
        rule = self.registry.lookup("com.tencent.qqmusic")
        self.assertEqual(rule.custom_name, "QQ Music")

    def test_lookup_unknown_returns_default(self):
        """규칙이 없으면 기본 규칙"""
        rule = self.registry.lookup("com.unknown.player")
        self.assertEqual(rule.package_name, "com.unknown.player")
        self.assertTrue(rule.enabled)
        self.assertEqual(rule.separator_pattern, "-")
        self.assertEqual(rule.field_order, FieldOrder.ARTIST_TITLE)
        self.assertFalse(rule.use_online_lyrics)
        self.assertNotIn("com.unknown.player", self.registry)

    def test_custom_default_factory(self):
        registry = RuleRegistry(default_factory=lambda name: ParserRule(name, separator_pattern=" | "))
        self.assertEqual(registry.lookup("com.x").separator_pattern, " | ")

    def test_find(self):
        self.assertIsNone(self.registry.find("com.unknown.player"))
        self.assertIsNotNone(self.registry.find("com.netease.cloudmusic"))

    def test_upsert_then_lookup(self):
        rule = ParserRule("com.example.player", separator_pattern=" | ", field_order=FieldOrder.TITLE_ARTIST)
        self.assertTrue(self.registry.upsert(rule))
        self.assertEqual(self.registry.lookup("com.example.player"), rule)

    def test_upsert_replaces(self):
        """같은 패키지명은 하나만 유지"""
        replacement = ParserRule("com.tencent.qqmusic", separator_pattern=" / ")
        self.registry.upsert(replacement)
        self.registry.upsert(replacement)
        self.assertEqual(len(self.registry), 2)
        self.assertEqual(self.registry.lookup("com.tencent.qqmusic"), replacement)

    def test_upsert_rejects_empty_package(self):
        self.assertFalse(self.registry.upsert(ParserRule("")))
        self.assertEqual(len(self.registry), 2)

    def test_list_all_sorted(self):
        """삽입 순서와 관계없이 패키지명 순"""
        registry = RuleRegistry()
        for name in ("com.z", "com.b", "com.m", "com.a"):
            registry.upsert(ParserRule(name))
        self.assertEqual(
            [r.package_name for r in registry.list_all()],
            ["com.a", "com.b", "com.m", "com.z"],
        )

    def test_duplicates_in_constructor(self):
        registry = RuleRegistry([ParserRule("com.a"), ParserRule("com.a", enabled=False)])
        self.assertEqual(len(registry), 1)
        self.assertFalse(registry.lookup("com.a").enabled)

    def test_remove(self):
        self.assertTrue(self.registry.remove("com.tencent.qqmusic"))
        self.assertFalse(self.registry.remove("com.tencent.qqmusic"))
        self.assertIsNone(self.registry.find("com.tencent.qqmusic"))

    def test_replace_all(self):
        self.registry.replace_all([ParserRule("com.only")])
        self.assertEqual([r.package_name for r in self.registry.list_all()], ["com.only"])

    def test_app_name(self):
        self.assertEqual(self.registry.get_app_name("com.tencent.qqmusic"), "QQ Music")
        self.assertEqual(self.registry.get_app_name("com.netease.cloudmusic"), "com.netease.cloudmusic")
        self.assertEqual(self.registry.get_app_name("com.unknown"), "com.unknown")

    def test_enabled_packages(self):
        self.assertEqual(self.registry.enabled_packages(), {"com.tencent.qqmusic"})


class TestRuleRegistryObservers(unittest.TestCase):
    def setUp(self):
        self.registry = RuleRegistry()
        self.received = []

    def test_observer_receives_sorted_rules(self):
        self.registry.add_observer(self.received.append)
        self.registry.upsert(ParserRule("com.b"))
        self.registry.upsert(ParserRule("com.a"))
        self.assertEqual(len(self.received), 2)
        self.assertEqual([r.package_name for r in self.received[-1]], ["com.a", "com.b"])

    def test_no_notification_when_nothing_removed(self):
        self.registry.add_observer(self.received.append)
        self.registry.remove("com.missing")
        self.assertEqual(self.received, [])

    def test_failing_observer_is_isolated(self):
        def broken(rules):
            raise RuntimeError("disk full")

        self.registry.add_observer(broken)
        self.registry.add_observer(self.received.append)
        with self.assertLogs("services.rule_registry", level="ERROR"):
            self.assertTrue(self.registry.upsert(ParserRule("com.a")))
        self.assertEqual(len(self.received), 1)

    def test_remove_observer(self):
        self.registry.add_observer(self.received.append)
        self.registry.add_observer(self.received.append)
        self.registry.remove_observer(self.received.append)
        self.registry.upsert(ParserRule("com.a"))
        self.assertEqual(self.received, [])


class TestRuleRegistryConcurrency(unittest.TestCase):
    def test_readers_see_whole_rules(self):
        """동시 변경 중에도 읽기는 완전한 규칙만 봄"""
        old = ParserRule("com.a", separator_pattern="-", field_order=FieldOrder.ARTIST_TITLE)
        new = ParserRule("com.a", separator_pattern=" | ", field_order=FieldOrder.TITLE_ARTIST)
        registry = RuleRegistry([old])
        errors = []
        stop = threading.Event()

        def writer():
            for i in range(500):
                registry.upsert(new if i % 2 else old)
            stop.set()

        def reader():
            while not stop.is_set():
                rule = registry.lookup("com.a")
                if rule not in (old, new):
                    errors.append(rule)

        threads = [threading.Thread(target=reader) for _ in range(4)]
        threads.append(threading.Thread(target=writer))
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(errors, [])
        self.assertEqual(len(registry), 1)


    def test_observers_receive_lists_in_mutation_order(self):
        """느린 옵저버가 있어도 마지막으로 저장되는 목록은 최신 상태"""
        registry = RuleRegistry()
        saved = []
        entered = threading.Event()
        release = threading.Event()

        def slow_store(rules):
            if not saved:
                entered.set()
                release.wait(timeout=5)
            saved.append([r.package_name for r in rules])

        registry.add_observer(slow_store)

        first = threading.Thread(target=registry.upsert, args=(ParserRule("com.a"),))
        first.start()
        self.assertTrue(entered.wait(timeout=5))

        second = threading.Thread(target=registry.upsert, args=(ParserRule("com.b"),))
        second.start()
        second.join(timeout=0.2)
        release.set()
        first.join()
        second.join()

        self.assertEqual([r.package_name for r in registry.list_all()], ["com.a", "com.b"])
        self.assertEqual(saved, [["com.a"], ["com.a", "com.b"]])

    def test_observer_may_mutate_registry(self):
        """옵저버 안에서 다시 변경해도 교착되지 않음"""
        registry = RuleRegistry()

        def add_companion(rules):
            if "com.a.companion" not in registry:
                registry.upsert(ParserRule("com.a.companion"))

        registry.add_observer(add_companion)
        registry.upsert(ParserRule("com.a"))
        self.assertEqual(
            [r.package_name for r in registry.list_all()], ["com.a", "com.a.companion"]
        )


if __name__ == "__main__":
    unittest.main(verbosity=2)

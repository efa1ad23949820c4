"""
upsert.py 테스트
================
자연키 upsert, 커서 소진, 동시 실행 시 중복 (알려진 제약)
"""
import sys
import threading
from pathlib import Path

# 프로젝트 루트 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from fake_notion import FakeNotion

from clubsync.models import properties as p
from clubsync.services.upsert import find_by_key, iterate_pages, upsert

DS = "ds-agent"


def agent_props(agent_id, name):
    return {"エージェント名": p.build_title(name), "エージェントID": p.build_rich_text(agent_id)}


class TestUpsert:
    """upsert 테스트"""

    def setup_method(self):
        self.store = FakeNotion()
        self.store.add_data_source(DS)
        self.key = p.text_equals("エージェントID", "A1")

    def test_create_then_update(self):
        first = upsert(self.store, DS, self.key, agent_props("A1", "Alpha"))
        second = upsert(self.store, DS, self.key, agent_props("A1", "Alpha2"))

        assert first.created is True
        assert second.created is False
        assert second.id == first.id
        pages = self.store.live_pages(DS)
        assert len(pages) == 1
        assert p.read_title(pages[0]["properties"], "エージェント名") == "Alpha2"

    def test_unchanged_update_changes_nothing(self):
        upsert(self.store, DS, self.key, agent_props("A1", "Alpha"))
        upsert(self.store, DS, self.key, agent_props("A1", "Alpha"))
        assert self.store.created == 1
        assert self.store.changed == 0

    def test_archived_record_not_matched(self):
        first = upsert(self.store, DS, self.key, agent_props("A1", "Alpha"))
        self.store.archive_page(first.id)

        again = upsert(self.store, DS, self.key, agent_props("A1", "Alpha"))
        assert again.created is True
        assert again.id != first.id

    def test_template_only_on_create(self):
        first = upsert(self.store, DS, self.key, agent_props("A1", "Alpha"), template_id="tpl")
        upsert(self.store, DS, self.key, agent_props("A1", "Alpha"), template_id="tpl")

        assert self.store.page(first.id)["template_id"] == "tpl"
        assert self.store.calls.count("create") == 1

    def test_find_by_key_missing(self):
        assert find_by_key(self.store, DS, self.key) is None


class TestIteratePages:
    """커서를 끝까지 따라간다"""

    def setup_method(self):
        self.store = FakeNotion()
        self.store.add_data_source(DS)
        for i in range(5):
            self.store.create_page(DS, agent_props(f"A{i}", f"agent{i}"))

    def test_drains_all_pages(self):
        pages = list(iterate_pages(self.store, DS, page_size=2))
        assert len(pages) == 5
        assert self.store.calls.count("query") == 3

    def test_with_filter(self):
        pages = list(iterate_pages(self.store, DS, p.text_equals("エージェントID", "A3"), page_size=1))
        assert [p.read_text(pg["properties"], "エージェントID") for pg in pages] == ["A3"]


class TestConcurrentUpsert:
    """
    조회 → 생성이 원자적이지 않으므로 두 실행이 겹치면 중복이 생긴다
    (프로세스 간 잠금 없음, 문서화된 제약)
    """

    def test_race_creates_duplicates(self):
        store = FakeNotion()
        store.add_data_source(DS)
        key = p.text_equals("エージェントID", "A1")

        barrier = threading.Barrier(2)
        # 두 스레드 모두 "없음"을 확인한 뒤에 생성으로 진행
        store.query_hook = lambda ds, flt: barrier.wait(timeout=5)

        results = []

        def worker():
            results.append(upsert(store, DS, key, agent_props("A1", "Alpha")))

        threads = [threading.Thread(target=worker) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        assert len(results) == 2
        assert all(r.created for r in results)
        assert len(store.live_pages(DS)) == 2

    def test_sequential_runs_do_not_duplicate(self):
        store = FakeNotion()
        store.add_data_source(DS)
        key = p.text_equals("エージェントID", "A1")
        for _ in range(2):
            upsert(store, DS, key, agent_props("A1", "Alpha"))
        assert len(store.live_pages(DS)) == 1

"""Tests for the JSON-file record store."""
from __future__ import annotations

import pytest

from pei.config.models import Activity, PeiRecordData, RagFile
from pei.storage.base import RecordNotFoundError, RecordStore
from pei.storage.local import LocalRecordStore


def test_satisfies_protocol(store):
    assert isinstance(store, RecordStore)


def test_save_new_then_overwrite(store):
    first = store.save_pei(PeiRecordData(data={"aluno-nome": "Ana"}), None, "Ana")
    second = store.save_pei(PeiRecordData(data={"aluno-nome": "Ana B"}), first.id, "Ana B")

    assert second.id == first.id
    assert len(store.list_peis()) == 1
    assert store.get_pei(first.id).student_name == "Ana B"


def test_save_accepts_a_full_record(store):
    saved = store.save_pei(PeiRecordData(data={"x": "1"}), None, "Ana")
    again = store.save_pei(saved, saved.id, "Ana")
    assert again.data == {"x": "1"}


def test_list_newest_first(store):
    a = store.save_pei(PeiRecordData(), None, "A")
    b = store.save_pei(PeiRecordData(), None, "B")
    store.save_pei(PeiRecordData(), a.id, "A")
    assert [p.id for p in store.list_peis()] == [a.id, b.id]


def test_delete_pei(store):
    record = store.save_pei(PeiRecordData(), None, "A")
    assert store.delete_pei(record.id)
    assert not store.delete_pei(record.id)
    assert store.get_pei(record.id) is None


def test_activities_get_new_ids_and_source(store):
    suggestion = Activity(title="Bingo", goal_tags=["Curto Prazo"])
    saved = store.add_activities([suggestion], "pei-1")[0]
    assert saved.id != suggestion.id
    assert saved.source_pei_id == "pei-1"
    assert saved.goal_tags == ["Curto Prazo"]


def test_only_flags_are_mutable(store):
    saved = store.add_activities([Activity(title="Bingo")])[0]
    updated = store.update_activity(saved.id, is_favorited=True, is_dua=True)
    assert updated.is_favorited and updated.is_dua
    assert updated.title == "Bingo"

    with pytest.raises(ValueError):
        store.update_activity(saved.id, title="Outro")


def test_update_missing_activity(store):
    with pytest.raises(RecordNotFoundError):
        store.update_activity("nao-existe", is_favorited=True)


def test_rag_file_selection(store):
    rag = store.add_rag_file(RagFile(name="laudo.txt", content="x"))
    assert not rag.selected
    assert store.set_rag_file_selected(rag.id, True).selected
    assert store.list_rag_files()[0].selected
    with pytest.raises(RecordNotFoundError):
        store.set_rag_file_selected("nao-existe", True)
    assert store.delete_rag_file(rag.id)


def test_persists_to_json_file(tmp_path):
    path = tmp_path / "store.json"
    store = LocalRecordStore(path)
    record = store.save_pei(PeiRecordData(data={"aluno-nome": "Ana"}), None, "Ana")
    store.add_activities([Activity(title="Bingo", skills="leitura, escrita")])
    store.add_rag_file(RagFile(name="laudo.txt", content="x", selected=True))

    reloaded = LocalRecordStore(path)
    assert reloaded.get_pei(record.id).data == {"aluno-nome": "Ana"}
    assert reloaded.list_activities()[0].skills == ["leitura", "escrita"]
    assert reloaded.list_rag_files()[0].selected

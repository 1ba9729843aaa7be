from cliphistory.models import ClipboardEntry, DataType, HtmlContent, ImageContent, RtfContent, TextContent
from cliphistory.schema import entry_to_record
from cliphistory.services import ClipboardStore, CopiedIndicator
from cliphistory.views import ICONS, HistoryView, entry_preview


def test_rows_follow_history_order(seeded_store, scheduler, entry_a, entry_b):
    view = HistoryView(seeded_store, CopiedIndicator(scheduler=scheduler))
    rows = view.rows()

    assert [row.id for row in rows] == [entry_a.id, entry_b.id]
    assert rows[0].icon == "doc.text"
    assert rows[1].icon == "link"
    assert rows[0].time_label == "10:00"
    assert rows[1].preview == "http://x.com"


def test_select_marks_entry_copied(seeded_store, scheduler, entry_a, entry_b):
    view = HistoryView(seeded_store, CopiedIndicator(duration=2.0, scheduler=scheduler))

    assert view.on_select(entry_b) is True
    rows = {row.id: row for row in view.rows()}
    assert rows[entry_b.id].copied and rows[entry_b.id].status == "Copied!"
    assert not rows[entry_a.id].copied

    scheduler.advance(2.0)
    assert not any(row.copied for row in view.rows())


def test_two_rapid_selects_show_only_the_latest(seeded_store, scheduler, entry_a, entry_b):
    view = HistoryView(seeded_store, CopiedIndicator(duration=2.0, scheduler=scheduler))
    view.on_select(entry_a)
    scheduler.advance(0.5)
    view.on_select(entry_b)

    for _ in range(4):
        scheduler.advance(0.5)
        copied = [row.id for row in view.rows() if row.copied]
        assert copied in ([entry_b.id], [])
    assert seeded_store.clipboard.read().url == "http://x.com"


def test_select_by_id(seeded_store, scheduler, entry_a):
    view = HistoryView(seeded_store, CopiedIndicator(scheduler=scheduler))
    assert view.on_select(entry_a.id) is True
    assert view.on_select("unknown") is False


def test_failed_copy_shows_no_confirmation(seeded_store, scheduler, entry_a):
    seeded_store.clipboard.fail_writes = True
    view = HistoryView(seeded_store, CopiedIndicator(scheduler=scheduler))

    assert view.on_select(entry_a) is False
    assert not any(row.copied for row in view.rows())


def test_clear_empties_rows_and_indicator(seeded_store, scheduler, entry_a):
    view = HistoryView(seeded_store, CopiedIndicator(scheduler=scheduler))
    view.on_select(entry_a)
    view.on_clear()

    assert view.rows() == []
    assert view.indicator.current_id is None


def test_on_appear_loads_history(clipboard, backend, entry_a):
    backend.records.append(entry_to_record(entry_a))
    view = HistoryView(ClipboardStore(clipboard=clipboard, backend=backend))
    assert view.rows() == []

    view.on_appear()
    assert [row.id for row in view.rows()] == [entry_a.id]


def test_hover_tracks_one_entry(seeded_store, entry_a, entry_b):
    view = HistoryView(seeded_store)
    view.on_hover(entry_a.id, True)
    view.on_hover(entry_b.id, True)
    view.on_hover(entry_a.id, False)

    assert [row.hovered for row in view.rows()] == [False, True]
    view.on_hover(entry_b.id, False)
    assert view.hovered_id is None


def test_every_type_has_an_icon():
    assert set(ICONS) == set(DataType)


def test_text_preview_is_limited_to_two_lines():
    entry = ClipboardEntry(content=TextContent("one\ntwo\nthree"))
    assert entry_preview(entry) == "one\ntwo…"


def test_long_text_preview_is_truncated():
    preview = entry_preview(ClipboardEntry(content=TextContent("x" * 500)))
    assert len(preview) == 120
    assert preview.endswith("…")


def test_image_preview_reports_dimensions(make_png):
    entry = ClipboardEntry(content=ImageContent(make_png(size=(640, 480))))
    assert entry_preview(entry).startswith("Image 640×480 (")


def test_undecodable_image_preview_falls_back_to_size():
    entry = ClipboardEntry(content=ImageContent(b"\x00" * 2048))
    assert entry_preview(entry) == "Image (2.0 KB)"


def test_html_and_rtf_previews():
    html = ClipboardEntry(content=HtmlContent(b"  <b>bold</b>\n<i>more</i>  "))
    rtf = ClipboardEntry(content=RtfContent(b"{\\rtf1 x}"))

    assert entry_preview(html) == "HTML Content <b>bold</b>…"
    assert entry_preview(rtf) == "Rich Text Content"

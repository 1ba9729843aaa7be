from cliphistory.views.history_view import ICONS, EntryRow, HistoryView, entry_preview

__all__ = ['ICONS', 'EntryRow', 'HistoryView', 'entry_preview']

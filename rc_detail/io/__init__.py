"""Export of generated geometry."""

from rc_detail.io.stl_export import STLExportError, save_stl, to_stl_mesh

__all__ = ['STLExportError', 'save_stl', 'to_stl_mesh']

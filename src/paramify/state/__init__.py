"""State/store layer.

Each component of the engine owns exactly one state container from
:mod:`paramify.state.store`. Containers are created once by
:class:`paramify.engine.ParamifyEngine` and replaced in place only by the
save/restore hooks in :mod:`paramify.state.persistence`.
"""

from .path_adder import PathAdder, normalize_path


__all__ = [
    'PathAdder',
    'normalize_path',
]

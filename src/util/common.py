def log2Ceil(x: int) -> int:
    assert x > 0, f"log2Ceil of a non-positive value: {x}"
    return (x - 1).bit_length()


def log2Up(x: int) -> int:
    return max(log2Ceil(x), 1)


def isPow2(x: int) -> bool:
    return x > 0 and not (x & (x - 1))

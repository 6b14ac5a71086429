from functools import reduce
from typing import Any, Callable, List, Tuple


def groupByIntoSeq(xs):
    m = {}
    def helper(f):
        for x in xs:
            key = f(x)
            if key not in m:
                m[key] = []
            m[key].append(x)
        return [(k, v) for k, v in m.items()]
    return helper


def orR(seq: List[Any]) -> Any:
    return reduce(lambda x, y: x | y, seq)


def pairs(xs: List[Any]) -> List[Tuple[Any, Any]]:
    return [(xs[i], xs[j]) for i in range(len(xs)) for j in range(i + 1, len(xs))]


if __name__ == "__main__":
    print(groupByIntoSeq([1, 2, 3])(lambda x: x % 2))

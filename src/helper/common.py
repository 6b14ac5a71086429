from __future__ import annotations
from pyhcl import Bool, Mux, U
from typing import Any, List


def foldLeft(f, l, v):
    ret = v
    for item in l:
        ret = f(ret, item)
    return ret


def isLiteral(*args) -> bool:
    # ints (and bools) are evaluated now; anything else is a pyhcl node
    return all(isinstance(x, int) for x in args)


def asBool(x: Any):
    if isinstance(x, bool):
        return Bool(x)
    return x


def mux1H(sel: List[Any], values: List[int], default: int = 0):
    if isLiteral(*sel):
        for s, v in zip(sel, values):
            if s:
                return v
        return default
    ret = U(default)
    for s, v in zip(sel, values):
        ret = Mux(asBool(s), U(v), ret)
    return ret


class cls_or_insmethod(classmethod):
    def __get__(self, instance, type_):
        descr_get = super().__get__ if instance is None else self.__func__.__get__
        return descr_get(instance, type_)


if __name__ == "__main__":
    print(foldLeft(lambda x, y: x + y, range(10), 0))
    print(mux1H([False, True], [3, 4]))

"""
函數組合工具。
"""
import functools
from typing import Any, Callable


def compose(*funcs: Callable[..., Any]) -> Callable[..., Any]:
    """
    由右至左組合單參數函數。

    最右邊的函數可以接收任意參數，因為它決定了組合後函數的簽名；
    其餘函數只接收前一個函數的回傳值。

        compose(f, g, h)  <=>  lambda *args, **kwargs: f(g(h(*args, **kwargs)))

    Args:
        *funcs: 要組合的函數。

    Returns:
        組合後的函數。沒有參數時回傳恆等函數；只有一個參數時原樣回傳該函數。

    範例:
        >>> inc = lambda x: x + 1
        >>> double = lambda x: x * 2
        >>> compose(inc, double)(5)
        11
    """
    if not funcs:
        return lambda arg: arg

    if len(funcs) == 1:
        return funcs[0]

    def pair(outer: Callable[..., Any], inner: Callable[..., Any]) -> Callable[..., Any]:
        def composed(*args: Any, **kwargs: Any) -> Any:
            return outer(inner(*args, **kwargs))
        return composed

    return functools.reduce(pair, funcs)

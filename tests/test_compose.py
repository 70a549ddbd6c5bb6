from pystorekit import compose


def append(letter):
    return lambda text: text + letter


def test_composes_from_right_to_left():
    a, b, c = append("a"), append("b"), append("c")

    assert compose(a, b, c)("x") == a(b(c("x")))
    assert compose(a, b, c)("x") == "xcba"


def test_composes_numeric_functions():
    double = lambda x: x * 2  # noqa: E731
    square = lambda x: x * x  # noqa: E731

    assert compose(square)(5) == 25
    assert compose(square, double)(5) == 100
    assert compose(double, square, double)(5) == 200


def test_rightmost_function_receives_all_arguments():
    total = lambda x, y, z=0: x + y + z  # noqa: E731

    assert compose(str, total)(1, 2, z=3) == "6"
    assert compose(str, str, total)(1, 2) == "3"


def test_returns_identity_when_no_functions():
    identity = compose()
    marker = object()

    assert identity(5) == 5
    assert identity(marker) is marker


def test_returns_single_function_unchanged():
    def f(*args):
        return args

    assert compose(f) is f
    assert compose(f)(1, 2, 3) == (1, 2, 3)

import io
import unittest

from lamf.lang.abstractions import BuiltinAbstractions
from lamf.lang.error import BuiltinContractError, DivisionByZero, InputError, NameResolutionError, ValueKindError
from lamf.lang.evaluator import Evaluator
from lamf.lang.values import HALT, Builtin, Closure, Num, Tag
from lamf.pure.lexical import tokenize
from lamf.pure.parser import parse


class EvaluatorTestCase(unittest.TestCase):

    def setUp(self):
        self.stdin = io.StringIO()
        self.stdout = io.BytesIO()
        self.evaluator = Evaluator(BuiltinAbstractions(self.stdin, self.stdout))

    def feed(self, text):
        self.stdin.write(text)
        self.stdin.seek(0)

    def run_source(self, source):
        return self.evaluator.run(parse(tokenize(source)))

    def value_of(self, source):
        return self.run_source(source)[-1]

    @property
    def output(self):
        return self.stdout.getvalue()


class ArithmeticTestCase(EvaluatorTestCase):

    def test_operators(self):
        cases = {
            "1 + 2 * 3": 7,
            "(1 + 2) * 3": 9,
            "10 - 2 - 3": 5,
            "7 / 2": 3,
            "(0 - 7) / 2": -4,
            "12 & 10": 8,
            "12 | 3": 15,
            "1 + 6 & 3": 3,
            "1_000 * 1e3": 1000000,
        }
        for case, expected in cases.items():
            self.assertEqual(Num(expected), self.value_of(case), case)

    def test_big_numbers(self):
        self.assertEqual(Num(2 ** 100), self.value_of("1267650600228229401496703205376 * 1"))

    def test_division_by_zero(self):
        with self.assertRaises(DivisionByZero) as context:
            self.run_source("a = 4\na / (a - 4)")
        self.assertEqual((2, 1), (context.exception.line, context.exception.col))
        self.assertEqual(len("a / (a - 4)"), context.exception.length)

    def test_halt_operands(self):
        self.run_source("h = (λn. 𝑓(0)) 1")
        for case in ("h + 1", "1 * h", "h / 0", "h - h"):
            self.assertIs(HALT, self.value_of(case), case)

    def test_non_number_operands(self):
        should_raise = ["(λx. x) + 1", "1 * print", "(λx. x) & (λy. y)"]
        for case in should_raise:
            self.assertRaises(ValueKindError, self.run_source, case)


class ApplicationTestCase(EvaluatorTestCase):

    def test_increment(self):
        self.assertEqual(Num(11), self.value_of("(λv. v + 1) 10"))
        self.assertEqual(b"", self.output)

    def test_sums(self):
        for a, b in ((0, 0), (3, 4), (100, 1_000)):
            self.assertEqual(Num(a + b), self.value_of(f"(λv. v + ({b})) {a}"))

    def test_negation(self):
        for a, b in ((5, -3), (-5, 3), (-2, -8), (0, -0)):
            self.assertEqual(Num(a + b), self.value_of(f"(λv. v + ({b})) ({a})"))
        self.assertEqual(Num(-7), self.value_of("-(3 + 4)"))
        self.assertEqual(Num(2), self.value_of("- -2"))

        self.run_source("(λprint. print) (-7)")
        self.assertEqual(b"-7", self.output)

        self.run_source("h = (λn. 𝑓(0)) 1")
        self.assertIs(HALT, self.value_of("-h"))
        self.assertRaises(ValueKindError, self.run_source, "-(λx. x)")

    def test_bindings(self):
        values = self.run_source("inc = λv. v + 1\n(inc) 41\ninc 1")
        self.assertIsInstance(values[0], Closure)
        self.assertEqual([Num(42), Num(2)], values[1:])

    def test_currying(self):
        self.run_source("add = λx. λy. x + y\nadd2 = (add) 2")
        self.assertEqual(Num(12), self.value_of("(add2) 10"))
        self.assertEqual(Num(12), self.value_of("add 2 10"))
        self.assertEqual(Num(12), self.value_of("((add) 2) 10"))

    def test_closures_capture_scope(self):
        self.run_source("k = (λx. λy. x) 1\nx = 100")
        self.assertEqual(Num(1), self.value_of("(k) 5"))

    def test_later_global_bindings_are_visible(self):
        self.run_source("g = λx. y + x\ny = 10")
        self.assertEqual(Num(11), self.value_of("(g) 1"))

    def test_parameter_does_not_leak(self):
        self.run_source("(λz. z) 3")
        self.assertRaises(NameResolutionError, self.run_source, "z")

    def test_unbound_name(self):
        with self.assertRaises(NameResolutionError) as context:
            self.run_source("a = 1\n  b + a")
        self.assertEqual((2, 3), (context.exception.line, context.exception.col))

    def test_unbound_name_inside_body(self):
        self.run_source("f = λx. x / missing")
        with self.assertRaises(NameResolutionError) as context:
            self.run_source("(f) 3")
        self.assertEqual((1, 13), (context.exception.line, context.exception.col))

    def test_applying_a_number(self):
        should_raise = ["(5) 3", "x = 5\n(x) 1", "x = 5\nx 1"]
        for case in should_raise:
            self.assertRaises(ValueKindError, self.run_source, case)

    def test_abstraction_value(self):
        value = self.value_of("(λx. x) λn.𝑓(0)")
        self.assertIsInstance(value, Closure)
        self.assertEqual("n", value.param)
        self.assertEqual(b"", self.output)

    def test_halt_callee_skips_argument(self):
        self.feed("x")
        self.run_source("h = (λn. 𝑓(0)) 5")
        self.assertIs(HALT, self.value_of("h (input 0)"))
        self.assertIs(HALT, self.value_of("(h) (λinput. input) 0"))
        self.assertIs(HALT, self.value_of("(λv. v) h"))
        self.assertEqual("x", self.stdin.read())


class DeliveryTestCase(EvaluatorTestCase):

    def test_hello_world(self):
        self.run_source("(λascii. ascii) 72 (λascii. ascii) 105 (λascii. ascii) 10")
        self.assertEqual(b"Hi\n", self.output)

    def test_identifier_arguments_in_one_line(self):
        self.run_source("h = 72\n(λascii. ascii) h (λascii. ascii) 105")
        self.assertEqual(b"Hi", self.output)

    def test_print(self):
        self.assertEqual(Num(20), self.value_of("(λprint. print) 20"))
        self.assertEqual(b"20", self.output)

    def test_print_of_application(self):
        self.assertEqual(Num(20), self.value_of("(λprint. print) (λv. v + 10) 10"))
        self.assertEqual(b"20", self.output)

    def test_delivers_abstraction_result(self):
        self.assertEqual(Num(20), self.value_of("(λprint. (λv. v + 10) 10) 0"))
        self.assertEqual(b"20", self.output)

    def test_stored_halt_reads_nothing(self):
        self.feed("7\n")
        self.run_source("halt = (λn.𝑓(0)) 0")
        self.assertIs(HALT, self.value_of("(λinput. input) halt"))
        self.assertEqual(b"", self.output)
        self.assertEqual("7\n", self.stdin.read())

    def test_delivers_body_result(self):
        self.assertEqual(Num(5), self.value_of("(λprint. print + 1) 4"))
        self.assertEqual(b"5", self.output)

    def test_ordinary_parameters_deliver_nothing(self):
        self.run_source("(λprinter. printer) 65\n(λp. (λx. x) p) 66")
        self.assertEqual(b"", self.output)

    def test_nested_delivery(self):
        self.run_source("(λascii. (λprint. print) ascii) 65")
        self.assertEqual(b"65A", self.output)

    def test_builtin_values(self):
        self.run_source("(print) 7\nprint 8\np = ascii\n(p) 33")
        self.assertEqual(b"78!", self.output)
        self.assertEqual(Builtin(Tag.TIME), self.value_of("time"))

    def test_input(self):
        self.feed("42\nA")
        self.run_source("(λprint. print) (λinput. input) 1\n(λprint. print) (input) 0")
        self.assertEqual(b"4265", self.output)
        self.assertRaises(InputError, self.run_source, "(input) 0")

    def test_builtin_contract(self):
        should_raise = ["(λascii. ascii) 256", "(ascii) (0 - 1)", "(input) 7", "(sleep) (0 - 5)", "(print) λx.x"]
        for case in should_raise:
            self.assertRaises(BuiltinContractError, self.run_source, case)
        self.assertEqual(b"", self.output)

    def test_shadowed_builtin(self):
        self.run_source("print = λx. x + 1")
        self.assertEqual(Num(3), self.value_of("(print) 2"))
        self.assertEqual(b"", self.output)


class RecursionTestCase(EvaluatorTestCase):

    def test_countdown(self):
        self.assertIs(HALT, self.value_of("(λprint. 𝑓(print-1)) 10"))
        self.run_source("(λascii. ascii) 10")
        self.assertEqual(b"9876543210\n", self.output)

    def test_every_byte(self):
        self.run_source("(λascii. 𝑓(ascii - 1)) 256")
        self.assertEqual(bytes(range(255, -1, -1)), self.output)

    def test_zero_halts_immediately(self):
        self.assertIs(HALT, self.value_of("(λprint. 𝑓(0)) 10"))
        self.assertEqual(b"0", self.output)

    def test_long_recursion_runs_in_constant_stack(self):
        self.assertIs(HALT, self.value_of("(λn. 𝑓(n - 1)) 100000"))

    def test_stored_halt(self):
        self.run_source("stop = (λn. 𝑓(n - 1)) 3")
        self.assertIs(HALT, self.evaluator.scope.lookup("stop"))

    def test_recursion_in_expression(self):
        # the inner recursion ends in HALT, which swallows the addition
        self.assertIs(HALT, self.value_of("(λn. 𝑓(n - 1) + 1) 3"))

    def test_recursion_in_argument(self):
        self.run_source("(λx. (λprint. print) 𝑓(x - 1)) 3")
        self.assertEqual(b"", self.output)

    def test_recursion_target_is_innermost_abstraction(self):
        self.run_source("(λx. (λprint. 𝑓(print - 1)) x) 3")
        self.assertEqual(b"210", self.output)

    def test_recursion_needs_numbers(self):
        self.assertRaises(ValueKindError, self.run_source, "(λn. 𝑓(λx. x)) 1")

    def test_recursive_error_position(self):
        with self.assertRaises(DivisionByZero) as context:
            self.run_source("(λn. 𝑓(1 / (n - 1))) 1")
        self.assertEqual((1, 8), (context.exception.line, context.exception.col))



class IsolationTestCase(unittest.TestCase):

    SOURCE = (
        "inc = λv. v + 1\n"
        "(λprint. 𝑓(print - 1)) (inc) 9\n"
        "(λascii. (λprint. print) ascii) 65\n"
        "(λascii. ascii) 10\n"
    )

    def run_fresh(self):
        stdout = io.BytesIO()
        evaluator = Evaluator(BuiltinAbstractions(io.StringIO(), stdout))
        values = evaluator.run(parse(tokenize(self.SOURCE)))
        return values, stdout.getvalue()

    def test_runs_are_deterministic(self):
        first_values, first_output = self.run_fresh()
        second_values, second_output = self.run_fresh()

        self.assertEqual(b"987654321065A\n", first_output)
        self.assertEqual(first_output, second_output)
        self.assertEqual(first_values[1:], second_values[1:])

    def test_runs_do_not_share_bindings(self):
        Evaluator(BuiltinAbstractions(io.StringIO(), io.BytesIO())).run(parse(tokenize("only_here = 1")))
        fresh = Evaluator(BuiltinAbstractions(io.StringIO(), io.BytesIO()))
        self.assertRaises(NameResolutionError, fresh.run, parse(tokenize("only_here")))


if __name__ == '__main__':
    unittest.main()

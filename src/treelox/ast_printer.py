import treelox.expr as ex


class AstPrinter:
    """Renders an expression tree as a parenthesized, Lisp-like string."""

    def print(self, expr: ex.Expr) -> str:
        match expr:
            case ex.Binary(left, operator, right) | ex.Logical(left, operator, right):
                return self.parenthesize(operator.lexeme, left, right)
            case ex.Grouping(expression):
                return self.parenthesize("group", expression)
            case ex.Literal(None):
                return "nil"
            case ex.Literal(bool(value)):
                return str(value).lower()
            case ex.Literal(str(value)):
                return f'"{value}"'
            case ex.Literal(value):
                return str(value)
            case ex.Unary(operator, right):
                return self.parenthesize(operator.lexeme, right)
            case ex.Ternary(condition, then_branch, else_branch):
                return self.parenthesize("?:", condition, then_branch, else_branch)
            case ex.Variable(name):
                return name.lexeme
            case ex.Assign(name, value):
                return f"(= {name.lexeme} {self.print(value)})"
            case ex.Call(callee, _, arguments):
                return self.parenthesize("call", callee, *arguments)
            case ex.Get(obj, name):
                return f"(. {self.print(obj)} {name.lexeme})"
            case ex.Set(obj, name, value):
                return f"(= (. {self.print(obj)} {name.lexeme}) {self.print(value)})"
            case ex.This():
                return "this"
            case ex.Super(_, method):
                return f"(super {method.lexeme})"
            case _:
                raise NotImplementedError(f"'{expr.__class__.__name__}' can't be printed")

    def parenthesize(self, name: str, *exprs: ex.Expr) -> str:
        content = " ".join([self.print(expr) for expr in exprs])

        return f"({name} {content})"

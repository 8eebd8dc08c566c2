"""Language feature tables used by the structural evaluators."""

from __future__ import annotations

import re
from dataclasses import dataclass, field


@dataclass(frozen=True)
class LanguageFeatures:
    """Keywords and patterns that signal idiomatic code in one language.

    Attributes:
        name: Display name.
        functions: Definition keywords (``def``, ``func``, ...).
        keywords: Control-flow keywords.
        methods: Common built-ins and library calls, matched literally.
        patterns: Named regexes for larger constructs.
        match_tokens: Lowercase substrings that identify the language at a glance.
    """

    name: str
    functions: tuple[str, ...]
    keywords: tuple[str, ...]
    methods: tuple[str, ...]
    patterns: dict[str, re.Pattern[str]] = field(default_factory=dict)
    match_tokens: tuple[str, ...] = ()


def _patterns(**raw: str) -> dict[str, re.Pattern[str]]:
    return {name: re.compile(expr) for name, expr in raw.items()}


_JS_METHODS = (
    "map", "filter", "reduce", "forEach", "find", "findIndex", "some", "every",
    "includes", "push", "pop", "shift", "unshift", "slice", "splice", "concat",
    "join", "split",
)  # fmt: skip

LANGUAGES: dict[str, LanguageFeatures] = {
    "javascript": LanguageFeatures(
        name="JavaScript",
        functions=("function", "const", "let", "var", "=>", "return", "async", "await"),
        keywords=(
            "if", "else", "for", "while", "do", "switch", "case", "break", "continue",
            "try", "catch", "throw",
        ),  # fmt: skip
        methods=(*_JS_METHODS, "toString", "parseInt", "parseFloat"),
        patterns=_patterns(
            function_declaration=r"function\s+\w+\s*\([^)]*\)",
            arrow_function=r"(?:const|let|var)\s+\w+\s*=\s*(?:\([^)]*\)|[^=]*)\s*=>",
            variable_declaration=r"(?:const|let|var)\s+\w+",
            conditionals=r"\b(?:if|else if|else|switch)\b",
            loops=r"\b(?:for|while|do)\b",
            async_await=r"\b(?:async|await)\b",
            try_catch=r"\b(?:try|catch|finally)\b",
            classes=r"class\s+\w+",
            imports=r"\b(?:import|require)\b",
            exports=r"\b(?:export|module\.exports)\b",
        ),
        match_tokens=("function ", "=>", "console.log"),
    ),
    "typescript": LanguageFeatures(
        name="TypeScript",
        functions=(
            "function", "const", "let", "var", "=>", "return", "async", "await", "type",
            "interface",
        ),  # fmt: skip
        keywords=(
            "if", "else", "for", "while", "do", "switch", "case", "break", "continue",
            "try", "catch", "throw", "type", "interface", "enum", "namespace", "module",
        ),  # fmt: skip
        methods=("console.log", *_JS_METHODS),
        patterns=_patterns(
            function_declaration=r"function\s+\w+\s*(?:<[^>]+>)?\s*\([^)]*\)\s*:\s*\w+",
            arrow_function=r"(?:const|let|var)\s+\w+\s*=\s*(?:\([^)]*\)|[^=]*)\s*=>",
            type_annotation=(
                r":\s*(?:string|number|boolean|any|unknown|void|never|object|\w+\[\]|Promise<\w+>)"
            ),
            interface=r"interface\s+\w+",
            type_alias=r"type\s+\w+\s*=",
            generic_types=r"<[^>]+>",
            conditionals=r"\b(?:if|else if|else|switch)\b",
            loops=r"\b(?:for|while|do)\b",
            async_await=r"\b(?:async|await)\b",
            classes=r"class\s+\w+",
            enum=r"enum\s+\w+",
        ),
        match_tokens=("function ", "=>", "console.log"),
    ),
    "python": LanguageFeatures(
        name="Python",
        functions=("def", "lambda", "return", "yield", "async", "await"),
        keywords=(
            "if", "elif", "else", "for", "while", "try", "except", "finally", "with",
            "import", "from", "as", "pass", "break", "continue", "raise",
        ),  # fmt: skip
        methods=(
            "print", "input", "len", "range", "enumerate", "zip", "map", "filter",
            "sorted", "reversed", "sum", "min", "max", "abs", "round", "isinstance",
            "type", "str", "int", "float", "list", "dict", "tuple", "set",
        ),  # fmt: skip
        patterns=_patterns(
            function_declaration=r"def\s+\w+\s*\([^)]*\)\s*:",
            lambda_function=r"lambda\s+[^:]+:",
            class_declaration=r"class\s+\w+",
            conditionals=r"\b(?:if|elif|else)\b",
            loops=r"\b(?:for|while)\b",
            try_except=r"\b(?:try|except|finally)\b",
            imports=r"\b(?:import|from)\b",
            list_comprehension=r"\[[^\]]+\s+for\s+[^\]]+\]",
            dict_comprehension=r"\{[^}]+\s+for\s+[^}]+\}",
            decorators=r"@\w+",
        ),
        match_tokens=("def ", "import ", "print("),
    ),
    "java": LanguageFeatures(
        name="Java",
        functions=(
            "public", "private", "protected", "static", "void", "return", "class", "interface"
        ),
        keywords=(
            "if", "else", "for", "while", "do", "switch", "case", "break", "continue",
            "try", "catch", "finally", "throw", "throws", "new", "this", "super",
            "extends", "implements",
        ),  # fmt: skip
        methods=(
            "System.out.println", "System.out.print", "Scanner", "ArrayList", "HashMap",
            "HashSet", "String.valueOf", "Integer.parseInt", "Double.parseDouble",
            "Math.", "equals", "toString", "length", "size", "add", "remove", "get",
            "set", "contains",
        ),  # fmt: skip
        patterns=_patterns(
            class_declaration=r"(?:public|private|protected)?\s*class\s+\w+",
            method_declaration=(
                r"(?:public|private|protected)\s+(?:static\s+)?[\w<>\[\]]+\s+\w+\s*\([^)]*\)"
            ),
            main_method=r"public\s+static\s+void\s+main\s*\(\s*String\[\]\s+\w+\s*\)",
            conditionals=r"\b(?:if|else if|else|switch)\b",
            loops=r"\b(?:for|while|do)\b",
            try_catch=r"\b(?:try|catch|finally)\b",
            object_creation=r"new\s+\w+\s*\(",
            imports=r"import\s+[\w.]+",
            interfaces=r"interface\s+\w+",
        ),
        match_tokens=("public class", "static void main", "system.out.println"),
    ),
    "c": LanguageFeatures(
        name="C",
        functions=(
            "int", "void", "char", "float", "double", "return", "struct", "union", "typedef"
        ),
        keywords=(
            "if", "else", "for", "while", "do", "switch", "case", "break", "continue",
            "goto", "return", "const", "static", "extern", "register", "auto", "sizeof",
        ),  # fmt: skip
        methods=(
            "printf", "scanf", "malloc", "calloc", "realloc", "free", "strlen", "strcpy",
            "strcmp", "strcat", "memcpy", "memset", "fopen", "fclose", "fprintf",
            "fscanf", "fgets", "fputs",
        ),  # fmt: skip
        patterns=_patterns(
            function_declaration=(
                r"(?:int|void|char|float|double|struct\s+\w+|\w+\*)\s+\w+\s*\([^)]*\)"
            ),
            main_function=r"int\s+main\s*\([^)]*\)",
            struct_declaration=r"struct\s+\w+\s*\{",
            conditionals=r"\b(?:if|else if|else|switch)\b",
            loops=r"\b(?:for|while|do)\b",
            includes=r"#include\s*[<\"][^>\"]+[>\"]",
            define=r"#define\s+\w+",
            pointers=r"\w+\s*\*+\s*\w+",
            arrays=r"\w+\s+\w+\s*\[[^\]]*\]",
        ),
        match_tokens=("#include", "int main("),
    ),
    "c++": LanguageFeatures(
        name="C++",
        functions=("int", "void", "char", "float", "double", "bool", "return", "class", "struct"),
        keywords=(
            "if", "else", "for", "while", "do", "switch", "case", "break", "continue",
            "try", "catch", "throw", "new", "delete", "const", "static", "public",
            "private", "protected",
        ),  # fmt: skip
        methods=(
            "cout", "cin", "printf", "scanf", "malloc", "free", "sizeof", "strlen",
            "strcpy", "strcmp", "vector", "push_back", "pop_back", "size", "clear",
            "sort", "find", "begin", "end",
        ),  # fmt: skip
        patterns=_patterns(
            function_declaration=(
                r"(?:int|void|char|float|double|bool|string|auto)\s+\w+\s*\([^)]*\)"
            ),
            main_function=r"int\s+main\s*\([^)]*\)",
            class_declaration=r"class\s+\w+",
            conditionals=r"\b(?:if|else if|else|switch)\b",
            loops=r"\b(?:for|while|do)\b",
            try_catch=r"\b(?:try|catch)\b",
            includes=r"#include\s*[<\"][^>\"]+[>\"]",
            namespace=r"using\s+namespace\s+\w+",
            pointers=r"\w+\s*\*\s*\w+",
            references=r"\w+\s*&\s*\w+",
            templates=r"template\s*<[^>]+>",
        ),
        match_tokens=("#include", "using namespace", "int main("),
    ),
    "c#": LanguageFeatures(
        name="C#",
        functions=(
            "public", "private", "protected", "static", "void", "return", "class",
            "interface", "async", "await",
        ),  # fmt: skip
        keywords=(
            "if", "else", "for", "foreach", "while", "do", "switch", "case", "break",
            "continue", "try", "catch", "finally", "throw", "new", "this", "base",
            "using", "namespace",
        ),  # fmt: skip
        methods=(
            "Console.WriteLine", "Console.ReadLine", "String.Format", "int.Parse",
            "double.Parse", "List", "Dictionary", "Array", "LINQ", "ToString", "Add",
            "Remove", "Contains", "Count", "Length", "Where", "Select", "FirstOrDefault",
        ),  # fmt: skip
        patterns=_patterns(
            class_declaration=r"(?:public|private|protected)?\s*class\s+\w+",
            method_declaration=(
                r"(?:public|private|protected)\s+(?:static\s+)?(?:async\s+)?"
                r"[\w<>\[\]]+\s+\w+\s*\([^)]*\)"
            ),
            main_method=r"static\s+void\s+Main\s*\([^)]*\)",
            conditionals=r"\b(?:if|else if|else|switch)\b",
            loops=r"\b(?:for|foreach|while|do)\b",
            try_catch=r"\b(?:try|catch|finally)\b",
            async_await=r"\b(?:async|await)\b",
            using_statements=r"using\s+[\w.]+",
            lambda_expression=r"=>\s*(?:\{|[^;])",
            properties=r"(?:public|private|protected)\s+\w+\s+\w+\s*\{\s*get;",
        ),
        match_tokens=("using system", "public class", "console.writeline"),
    ),
    "go": LanguageFeatures(
        name="Go",
        functions=("func", "return", "defer", "go", "chan", "interface", "struct"),
        keywords=(
            "if", "else", "for", "switch", "case", "break", "continue", "fallthrough",
            "goto", "range", "select", "var", "const", "type", "import", "package",
        ),  # fmt: skip
        methods=(
            "fmt.Println", "fmt.Printf", "fmt.Scanf", "len", "cap", "make", "append",
            "copy", "delete", "close", "panic", "recover",
        ),  # fmt: skip
        patterns=_patterns(
            function_declaration=r"func\s+(?:\w+\s+)?(\w+)\s*\([^)]*\)",
            main_function=r"func\s+main\s*\(\s*\)",
            struct_declaration=r"type\s+\w+\s+struct",
            interface_declaration=r"type\s+\w+\s+interface",
            conditionals=r"\b(?:if|else if|else|switch)\b",
            loops=r"\bfor\b",
            goroutines=r"\bgo\b\s+\w+",
            channels=r"\bchan\b",
            imports=r"import\s+(?:\([\s\S]*?\)|\"[^\"]+\")",
            defer=r"\bdefer\b",
        ),
        match_tokens=("package main", "func main("),
    ),
    "rust": LanguageFeatures(
        name="Rust",
        functions=("fn", "return", "impl", "trait", "struct", "enum", "async", "await"),
        keywords=(
            "if", "else", "for", "while", "loop", "match", "break", "continue", "return",
            "let", "mut", "const", "use", "mod", "pub", "impl", "trait", "struct", "enum",
        ),  # fmt: skip
        methods=(
            "println!", "print!", "format!", "vec!", "panic!", "assert!", "unwrap",
            "expect", "map", "filter", "collect", "iter", "push", "pop", "len",
            "is_empty", "to_string", "parse", "clone",
        ),  # fmt: skip
        patterns=_patterns(
            function_declaration=r"fn\s+\w+\s*(?:<[^>]+>)?\s*\([^)]*\)",
            main_function=r"fn\s+main\s*\(\s*\)",
            struct_declaration=r"struct\s+\w+",
            enum_declaration=r"enum\s+\w+",
            trait_declaration=r"trait\s+\w+",
            impl_block=r"impl\s+(?:<[^>]+>)?\s*\w+",
            conditionals=r"\b(?:if|else if|else|match)\b",
            loops=r"\b(?:for|while|loop)\b",
            macros=r"\w+!",
            borrowing=r"&(?:mut\s+)?\w+",
            lifetimes=r"'[a-z]",
        ),
        match_tokens=("fn main(",),
    ),
    "php": LanguageFeatures(
        name="PHP",
        functions=("function", "return", "echo", "print", "class", "interface", "trait"),
        keywords=(
            "if", "else", "elseif", "for", "foreach", "while", "do", "switch", "case",
            "break", "continue", "try", "catch", "finally", "throw", "new", "use",
            "namespace", "const",
        ),  # fmt: skip
        methods=(
            "echo", "print", "var_dump", "print_r", "strlen", "strpos", "substr",
            "str_replace", "explode", "implode", "array_push", "array_pop", "count",
            "isset", "empty", "is_array", "json_encode", "json_decode",
        ),  # fmt: skip
        patterns=_patterns(
            php_tag=r"<\?php",
            function_declaration=r"function\s+\w+\s*\([^)]*\)",
            class_declaration=r"class\s+\w+",
            conditionals=r"\b(?:if|elseif|else|switch)\b",
            loops=r"\b(?:for|foreach|while|do)\b",
            try_catch=r"\b(?:try|catch|finally)\b",
            variables=r"\$\w+",
            echo_or_print=r"\b(?:echo|print)\b",
            namespace=r"namespace\s+[\w\\]+",
            use=r"use\s+[\w\\]+",
        ),
        match_tokens=("<?php", "function ", "echo"),
    ),
    "ruby": LanguageFeatures(
        name="Ruby",
        functions=("def", "return", "yield", "lambda", "proc", "class", "module"),
        keywords=(
            "if", "elsif", "else", "unless", "case", "when", "for", "while", "until",
            "loop", "break", "next", "redo", "rescue", "ensure", "raise", "begin",
            "end", "do",
        ),  # fmt: skip
        methods=(
            "puts", "print", "p", "gets", "chomp", "length", "size", "empty?",
            "include?", "map", "select", "reject", "each", "times", "upto", "downto",
            "push", "pop", "shift", "unshift", "join", "split",
        ),  # fmt: skip
        patterns=_patterns(
            method_definition=r"def\s+\w+(?:\([^)]*\))?",
            class_declaration=r"class\s+\w+",
            module_declaration=r"module\s+\w+",
            conditionals=r"\b(?:if|elsif|else|unless|case|when)\b",
            loops=r"\b(?:for|while|until|loop|each|times)\b",
            blocks=r"\bdo\b|\{[^}]*\}",
            symbols=r":\w+",
            string_interpolation=r"#\{[^}]+\}",
            rescue=r"\b(?:begin|rescue|ensure|raise)\b",
        ),
        match_tokens=("def ", "end", "puts"),
    ),
    "swift": LanguageFeatures(
        name="Swift",
        functions=("func", "return", "class", "struct", "enum", "protocol", "extension", "init"),
        keywords=(
            "if", "else", "guard", "for", "while", "repeat", "switch", "case", "break",
            "continue", "fallthrough", "return", "let", "var", "in", "try", "catch",
            "throw", "defer",
        ),  # fmt: skip
        methods=(
            "print", "Array", "Dictionary", "Set", "map", "filter", "reduce", "forEach",
            "compactMap", "flatMap", "append", "remove", "count", "isEmpty", "first",
            "last", "contains",
        ),  # fmt: skip
        patterns=_patterns(
            function_declaration=r"func\s+\w+\s*(?:<[^>]+>)?\s*\([^)]*\)",
            class_declaration=r"class\s+\w+",
            struct_declaration=r"struct\s+\w+",
            enum_declaration=r"enum\s+\w+",
            protocol_declaration=r"protocol\s+\w+",
            conditionals=r"\b(?:if|else if|else|guard|switch)\b",
            loops=r"\b(?:for|while|repeat)\b",
            optionals=r"\?|\!",
            closures=r"\{[^}]*in[^}]*\}",
            try_catch=r"\b(?:try|catch|throw|defer)\b",
        ),
        match_tokens=("func ", "let ", "var "),
    ),
    "kotlin": LanguageFeatures(
        name="Kotlin",
        functions=("fun", "return", "class", "interface", "object", "companion", "suspend"),
        keywords=(
            "if", "else", "when", "for", "while", "do", "break", "continue", "return",
            "val", "var", "in", "is", "as", "try", "catch", "finally", "throw",
        ),  # fmt: skip
        methods=(
            "println", "print", "readLine", "toInt", "toDouble", "toString", "listOf",
            "mutableListOf", "mapOf", "mutableMapOf", "setOf", "mutableSetOf", "map",
            "filter", "forEach", "any", "all", "none", "first", "last", "size",
        ),  # fmt: skip
        patterns=_patterns(
            function_declaration=r"fun\s+(?:<[^>]+>)?\s*\w+\s*\([^)]*\)",
            class_declaration=r"(?:class|data class|sealed class)\s+\w+",
            object_declaration=r"object\s+\w+",
            conditionals=r"\b(?:if|else if|else|when)\b",
            loops=r"\b(?:for|while|do)\b",
            try_catch=r"\b(?:try|catch|finally)\b",
            null_safety=r"\?\.|\?:",
            lambdas=r"\{[^}]*->[^}]*\}",
            extension_function=r"fun\s+\w+\.\w+",
            coroutines=r"\b(?:suspend|launch|async|await)\b",
        ),
        match_tokens=("fun ", "val ", "var "),
    ),
}

ALIASES: dict[str, str] = {
    "js": "javascript",
    "node": "javascript",
    "ts": "typescript",
    "py": "python",
    "python3": "python",
    "cpp": "c++",
    "cxx": "c++",
    "cs": "c#",
    "csharp": "c#",
    "golang": "go",
    "rs": "rust",
    "rb": "ruby",
    "kt": "kotlin",
}

GENERIC_TOKENS = (
    "function ", "def ", "class ", "=>", "if(", "for(", "while(", "switch(",
    "return ", "#include", "import ",
)  # fmt: skip


def normalize_language(language: str) -> str:
    """Canonical lowercase key for a language name or alias."""
    key = language.strip().lower()
    return ALIASES.get(key, key)


def get_language_features(language: str) -> LanguageFeatures | None:
    """Feature table for a language, or None if it is not supported."""
    return LANGUAGES.get(normalize_language(language))


def matches_language(code: str, language: str | None) -> bool:
    """Quick check that code looks like it is written in ``language``.

    Unknown or missing languages fall back to generic programming tokens.
    """
    lower = code.lower()
    features = get_language_features(language) if language else None
    if features is None or not features.match_tokens:
        return has_programming_features(lower)
    return any(token in lower for token in features.match_tokens)


def has_programming_features(code: str) -> bool:
    """True if code contains any language-agnostic programming token."""
    lower = code.lower()
    return any(token in lower for token in GENERIC_TOKENS)

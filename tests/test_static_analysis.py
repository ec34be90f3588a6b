#!/usr/bin/env python3
"""
Static analysis tests to catch code issues without execution.

These tests use Python's ast module to detect:
- Syntax errors
- Names imported from a project module that the module doesn't define
- Shared constants used without being imported

This helps catch runtime errors like ImportError and NameError before code is executed.
"""

import unittest
import ast
import re
from pathlib import Path


class TestStaticAnalysis(unittest.TestCase):
    """Test suite for static code analysis."""

    @classmethod
    def setUpClass(cls):
        """Set up test class with list of Python files to analyze."""
        cls.project_root = Path(__file__).parent.parent

        # Get all main Python scripts (not in tests)
        cls.python_files = []
        for file_path in cls.project_root.glob('*.py'):
            if file_path.name not in ['setup.py', '__init__.py']:
                cls.python_files.append(file_path)

        cls.local_modules = {file_path.stem: file_path for file_path in cls.python_files}

    def test_all_files_parseable(self):
        """Test that all Python files can be parsed (no syntax errors)."""
        for file_path in self.python_files:
            with self.subTest(file=file_path.name):
                try:
                    with open(file_path, 'r', encoding='utf-8') as f:
                        source = f.read()
                    ast.parse(source, filename=str(file_path))
                except SyntaxError as e:
                    self.fail(f"Syntax error in {file_path.name}: {e}")

    def test_imported_names_exist(self):
        """Test that names imported from project modules are defined there."""
        errors = []

        for file_path in self.python_files:
            tree = self._parse(file_path)
            if tree is None:
                continue

            imports = self._extract_imports(tree)
            for module, names in imports['from_imports'].items():
                if module not in self.local_modules:
                    continue

                defined = self._top_level_names(self._parse(self.local_modules[module]))
                for name in names:
                    if name != '*' and name not in defined:
                        errors.append(f"{file_path.name}: imports '{name}' but {module}.py doesn't define it")

        if errors:
            self.fail("Import errors detected:\n" + "\n".join(errors))

    def test_shared_constants_imported(self):
        """Test that files using shared constants import them from constants."""
        errors = []
        shared = ['BATCH_SIZES', 'RATE_LIMITS', 'ERROR_MESSAGES', 'SEARCH_LIMITS', 'STRATEGY_BONUSES']

        for file_path in self.python_files:
            # Skip constants.py - it defines these constants, doesn't import them
            if file_path.name == 'constants.py':
                continue

            tree = self._parse(file_path)
            if tree is None:
                continue

            imports = self._extract_imports(tree)
            for const_name in shared:
                if self._uses_constant(tree, const_name):
                    if not self._imports_from_module(imports, 'constants', const_name):
                        errors.append(
                            f"{file_path.name}: Uses {const_name} but doesn't import it from constants"
                        )

        if errors:
            self.fail("Import errors detected:\n" + "\n".join(errors))

    def test_no_bare_except(self):
        """Test that no module swallows every exception with a bare except."""
        errors = []

        for file_path in self.python_files:
            tree = self._parse(file_path)
            if tree is None:
                continue

            for node in ast.walk(tree):
                if isinstance(node, ast.ExceptHandler) and node.type is None:
                    errors.append(f"{file_path.name}:{node.lineno}: bare except")

        if errors:
            self.fail("Bare except clauses:\n" + "\n".join(errors))

    def test_no_common_typos(self):
        """Test for common variable name typos."""
        typos_to_check = {
            'STRATAGY': 'STRATEGY',
            'CONFIDANCE': 'CONFIDENCE',
        }

        errors = []

        for file_path in self.python_files:
            with open(file_path, 'r', encoding='utf-8') as f:
                source = f.read()

            for typo, correct in typos_to_check.items():
                if re.search(re.escape(typo), source):
                    errors.append(
                        f"{file_path.name}: Found potential typo '{typo}' (should be '{correct}')"
                    )

        if errors:
            self.fail("Potential typos detected:\n" + "\n".join(errors))

    # Helper methods

    def _parse(self, file_path):
        with open(file_path, 'r', encoding='utf-8') as f:
            source = f.read()
        try:
            return ast.parse(source, filename=str(file_path))
        except SyntaxError:
            return None  # Caught by test_all_files_parseable

    def _extract_imports(self, tree):
        """Extract all imports from an AST tree."""
        imports = {
            'modules': set(),  # Module names
            'from_imports': {}  # {module: [name1, name2, ...]}
        }

        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    imports['modules'].add(alias.name)
            elif isinstance(node, ast.ImportFrom):
                module = node.module or ''
                if module not in imports['from_imports']:
                    imports['from_imports'][module] = []
                for alias in node.names:
                    imports['from_imports'][module].append(alias.name)

        return imports

    def _top_level_names(self, tree):
        """Names bound at module level: functions, classes, assignments and imports."""
        names = set()
        if tree is None:
            return names

        for node in tree.body:
            if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
                names.add(node.name)
            elif isinstance(node, ast.Assign):
                for target in node.targets:
                    if isinstance(target, ast.Name):
                        names.add(target.id)
            elif isinstance(node, ast.AnnAssign) and isinstance(node.target, ast.Name):
                names.add(node.target.id)
            elif isinstance(node, (ast.Import, ast.ImportFrom)):
                for alias in node.names:
                    names.add((alias.asname or alias.name).split('.')[0])
        return names

    def _uses_constant(self, tree, const_name):
        """Check if a constant name is used in the AST."""
        for node in ast.walk(tree):
            if isinstance(node, ast.Name) and node.id == const_name:
                return True
        return False

    def _imports_from_module(self, imports, module, name):
        """Check if a specific name is imported from a module."""
        if module in imports['from_imports']:
            return name in imports['from_imports'][module] or '*' in imports['from_imports'][module]
        return False


if __name__ == '__main__':
    unittest.main()

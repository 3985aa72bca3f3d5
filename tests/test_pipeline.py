"""Tests for transform ordering, DOM helpers and the transform pipeline."""

import pytest

from html_transform.core.exceptions import SecurityRejectionError, TransformExecutionError
from html_transform.document import parse_html
from html_transform.transforms.models import TransformUnit
from html_transform.transforms.ordering import numeric_prefix, order_module_files
from html_transform.transforms.pipeline import TransformPipeline, apply_transforms
from html_transform.transforms.utils import TRANSFORM_UTILS

ADD_PARAGRAPH = '''
def transform(context):
    paragraph = context.document.new_tag("p", id="added")
    paragraph.string = "first"
    context.document.body.append(paragraph)


TRANSFORM = {"name": "add-paragraph", "transform": transform}
'''

MARK_PARAGRAPH = '''
def transform(context):
    context.document.find(id="added")["class"] = ["marked"]


TRANSFORM = {"name": "mark-paragraph", "transform": transform}
'''

FAILS_AT_IMPORT = '''
def transform(context):
    pass


TRANSFORM = {"transform": transform}

raise ImportError("missing dependency")
'''

NOT_CALLABLE = '''
def transform(context):
    pass


TRANSFORM = {"transform": None}
'''

COPY_FROM_TEMPLATE = '''
def transform(context):
    header = context.template_document.find("header")
    context.document.body.insert(0, header)


TRANSFORM = {"transform": transform}
'''


class TestOrdering:
    """Module execution order."""

    def test_numeric_prefix(self):
        assert numeric_prefix("01-title.py") == 1
        assert numeric_prefix("120_footer.py") == 120
        assert numeric_prefix("header.py") == float("inf")

    def test_default_order_by_prefix_then_name(self):
        files = ["10-b.py", "c.py", "2-a.py", "a.py", "1-z.py"]
        assert order_module_files(files) == ["1-z.py", "2-a.py", "10-b.py", "a.py", "c.py"]

    def test_unprefixed_files_sort_after_large_prefixes(self):
        assert order_module_files(["zz.py", "999-last.py", "1000-later.py"]) == [
            "999-last.py",
            "1000-later.py",
            "zz.py",
        ]

    def test_explicit_order(self):
        files = ["a.py", "b.py", "c.py", "d.py"]
        order = ["c.py", "missing.py", "a.py", "c.py"]
        assert order_module_files(files, order) == ["c.py", "a.py", "b.py", "d.py"]

    def test_empty_explicit_order_falls_back(self):
        assert order_module_files(["2-b.py", "1-a.py"], []) == ["1-a.py", "2-b.py"]


class TestTransformUtils:
    """DOM helpers handed to transforms."""

    def test_copy_attributes(self):
        doc = parse_html('<a id="src" class="x y" href="/"></a><b id="dst"></b>')
        source, target = doc.find("a"), doc.find("b")
        TRANSFORM_UTILS.copy_attributes(source, target)
        assert target["href"] == "/"
        assert target["class"] == ["x", "y"]
        target["class"].append("z")
        assert source["class"] == ["x", "y"]

    def test_move_children(self):
        doc = parse_html("<div id='a'><i>1</i>text<b>2</b></div><div id='b'><u>0</u></div>")
        source, target = doc.find(id="a"), doc.find(id="b")
        TRANSFORM_UTILS.move_children(source, target)
        assert source.contents == []
        assert [str(node) for node in target.contents] == ["<u>0</u>", "<i>1</i>", "text", "<b>2</b>"]

    def test_replace_element_uses_copy(self):
        doc = parse_html("<main><p id='old'>old</p></main>")
        template = parse_html("<section id='new'>new</section>")
        replacement = template.find("section")
        TRANSFORM_UTILS.replace_element(doc.find(id="old"), replacement)
        assert doc.find(id="new") is not None
        assert doc.find(id="old") is None
        assert template.find("section") is replacement

    def test_replace_detached_element_is_noop(self):
        doc = parse_html("<p>x</p>")
        detached = doc.new_tag("span")
        TRANSFORM_UTILS.replace_element(detached, doc.find("p"))
        assert str(doc) == "<p>x</p>"


class TestApplyTransforms:
    """Sequential application."""

    @pytest.mark.asyncio
    async def test_units_see_earlier_changes(self):
        calls = []

        def first(context):
            calls.append("first")
            context.document.body["data-step"] = "1"

        async def second(context):
            calls.append("second")
            context.document.body["data-step"] += "2"

        doc = parse_html("<html><body></body></html>")
        await apply_transforms(
            doc, [TransformUnit("first", first), TransformUnit("second", second)]
        )
        assert calls == ["first", "second"]
        assert doc.body["data-step"] == "12"

    @pytest.mark.asyncio
    async def test_failure_stops_the_run(self):
        calls = []

        def broken(context):
            raise ValueError("bad selector")

        def after(context):
            calls.append("after")

        doc = parse_html("<p></p>")
        with pytest.raises(TransformExecutionError) as exc_info:
            await apply_transforms(
                doc, [TransformUnit("broken", broken), TransformUnit("after", after)]
            )

        assert exc_info.value.unit_name == "broken"
        assert 'Transform "broken" failed: bad selector' in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert calls == []

    @pytest.mark.asyncio
    async def test_context_contents(self):
        seen = {}

        def capture(context):
            seen["template"] = context.template_document
            seen["config"] = context.config
            seen["utils"] = context.utils

        doc = parse_html("<p></p>")
        template = parse_html("<header></header>")
        await apply_transforms(doc, [TransformUnit("capture", capture)], template, {"site": "x"})
        assert seen["template"] is template
        assert seen["config"] == {"site": "x"}
        assert seen["utils"] is TRANSFORM_UTILS

    @pytest.mark.asyncio
    async def test_no_units_leaves_document_unchanged(self, sample_html):
        doc = parse_html(sample_html)
        await apply_transforms(doc, [])
        assert str(doc) == str(parse_html(sample_html))


class TestTransformPipeline:
    """Discovery, gated loading and application."""

    def test_discover_orders_and_ignores_non_modules(self, tmp_path, write_module, clean_source):
        write_module(tmp_path, "10-b.py", clean_source)
        write_module(tmp_path, "2-a.py", clean_source)
        (tmp_path / "config.yaml").write_text("input: x\n", encoding="utf-8")
        (tmp_path / "README.md").write_text("docs", encoding="utf-8")

        paths = TransformPipeline().discover(tmp_path)
        assert [p.name for p in paths] == ["2-a.py", "10-b.py"]
        assert all(p.is_absolute() for p in paths)

    def test_discover_with_explicit_order(self, tmp_path, write_module, clean_source):
        for name in ("a.py", "b.py", "c.py"):
            write_module(tmp_path, name, clean_source)
        paths = TransformPipeline().discover(tmp_path, ["c.py", "a.py"])
        assert [p.name for p in paths] == ["c.py", "a.py", "b.py"]

    @pytest.mark.asyncio
    async def test_run_updates_title(self, tmp_path, write_module, clean_source, sample_html):
        write_module(tmp_path, "01-update-title.py", clean_source)
        pipeline = TransformPipeline()
        doc = parse_html(sample_html)

        descriptors = await pipeline.run(doc, pipeline.discover(tmp_path))

        assert [d.file_name for d in descriptors] == ["01-update-title.py"]
        assert doc.title.string == "Updated"

    @pytest.mark.asyncio
    async def test_run_in_file_order(self, tmp_path, write_module, sample_html):
        write_module(tmp_path, "01-add.py", ADD_PARAGRAPH)
        write_module(tmp_path, "02-mark.py", MARK_PARAGRAPH)
        pipeline = TransformPipeline()
        doc = parse_html(sample_html)

        await pipeline.run(doc, pipeline.discover(tmp_path))

        assert doc.find(id="added")["class"] == ["marked"]

    @pytest.mark.asyncio
    async def test_security_rejection_aborts(
        self, tmp_path, write_module, clean_source, eval_source, sample_html
    ):
        write_module(tmp_path, "01-title.py", clean_source)
        write_module(tmp_path, "02-evil.py", eval_source)
        pipeline = TransformPipeline()
        doc = parse_html(sample_html)

        with pytest.raises(SecurityRejectionError, match="eval"):
            await pipeline.run(doc, pipeline.discover(tmp_path))
        assert doc.title.string == "Original"

    @pytest.mark.asyncio
    async def test_skip_security_check_applies_flagged_module(
        self, tmp_path, write_module, eval_source, sample_html
    ):
        write_module(tmp_path, "evil.py", eval_source)
        pipeline = TransformPipeline(skip_security_check=True)
        doc = parse_html(sample_html)

        await pipeline.run(doc, pipeline.discover(tmp_path))
        assert doc.title.string == "Injected"

    @pytest.mark.asyncio
    async def test_broken_modules_are_skipped(
        self, tmp_path, write_module, clean_source, sample_html
    ):
        write_module(tmp_path, "01-import-fails.py", FAILS_AT_IMPORT)
        write_module(tmp_path, "02-not-callable.py", NOT_CALLABLE)
        write_module(tmp_path, "03-title.py", clean_source)
        pipeline = TransformPipeline()

        descriptors = await pipeline.load_modules(pipeline.discover(tmp_path))

        assert [d.file_name for d in descriptors] == ["03-title.py"]

    @pytest.mark.asyncio
    async def test_template_document_is_available(self, tmp_path, write_module):
        write_module(tmp_path, "header.py", COPY_FROM_TEMPLATE)
        pipeline = TransformPipeline()
        doc = parse_html("<html><body><p>content</p></body></html>")
        template = parse_html("<header>Site</header>")

        await pipeline.run(doc, pipeline.discover(tmp_path), template_document=template)

        assert doc.body.contents[0].name == "header"

    @pytest.mark.asyncio
    async def test_load_follows_explicit_order(self, tmp_path, write_module):
        write_module(tmp_path, "01-mark.py", MARK_PARAGRAPH)
        write_module(tmp_path, "02-add.py", ADD_PARAGRAPH)
        pipeline = TransformPipeline()
        doc = parse_html("<html><body></body></html>")

        descriptors = await pipeline.load(tmp_path, ["02-add.py", "01-mark.py"])
        await pipeline.apply(doc, [d.unit for d in descriptors])

        assert [d.unit.name for d in descriptors] == ["add-paragraph", "mark-paragraph"]
        assert doc.find(id="added")["class"] == ["marked"]

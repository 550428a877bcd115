from scope import TestTree


has_run = []


with TestTree("PassingTests") as T:

    @T.setup_once
    def setUp():
        has_run.append("setup_once")

    @T.setup
    def setUp():
        has_run.append("setup")

    @T.should("A")
    def test(case):
        has_run.append("A")

    with T.context("context"):

        @T.setup_once
        def setUp():
            has_run.append("context:setup_once")

        @T.setup
        def setUp():
            has_run.append("context:setup")

        @T.should("Z")
        def test(case):
            has_run.append("context:Z")

        @T.should("A")
        def test(case):
            has_run.append("context:A")

        @T.teardown
        def tearDown():
            has_run.append("context:teardown")

        @T.teardown_once
        def tearDown():
            has_run.append("context:teardown_once")

    @T.teardown
    def tearDown():
        has_run.append("teardown")

    @T.teardown_once
    def tearDown():
        has_run.append("teardown_once")


T.create_tests(globals())


deep_has_run = []


with TestTree("DeepTests") as DT:

    @DT.teardown_once
    def tearDown():
        deep_has_run.append("root:teardown_once")

    @DT.should("run first")
    def test(case):
        deep_has_run.append("first")

    with DT.context("outer"):

        @DT.setup_once
        def setUp():
            deep_has_run.append("outer:setup_once")

        @DT.teardown_once
        def tearDown():
            deep_has_run.append("outer:teardown_once")

        @DT.should("run shallow")
        def test(case):
            deep_has_run.append("outer:shallow")

        with DT.context("middle"):

            @DT.teardown
            def tearDown():
                deep_has_run.append("middle:teardown")

            with DT.context("inner"):

                @DT.setup
                def setUp():
                    deep_has_run.append("inner:setup")

                @DT.teardown_once
                def tearDown():
                    deep_has_run.append("inner:teardown_once")

                @DT.should("run deep")
                def test(case):
                    deep_has_run.append("inner:deep")

            with DT.context("empty"):

                @DT.teardown_once
                def tearDown():
                    deep_has_run.append("empty:teardown_once")

    with DT.context("last"):

        @DT.should("run final")
        def test(case):
            deep_has_run.append("last:final")


DT.create_tests(globals())


expected_has_run = [
    "setup_once",
    "setup", "A", "teardown",
    "setup", "context:setup_once", "context:setup", "context:Z",
    "context:teardown", "teardown",
    "setup", "context:setup", "context:A",
    "context:teardown", "context:teardown_once", "teardown",
    "teardown_once",
]

expected_deep_has_run = [
    "first",
    "outer:setup_once", "outer:shallow",
    "inner:setup", "inner:deep",
    "inner:teardown_once", "middle:teardown", "outer:teardown_once",
    "last:final",
    "root:teardown_once",
]

expected_stream_output = [
    "should A ... ok",
    "context should Z ... ok",
    "context should A ... ok",
    "should run first ... ok",
    "outer should run shallow ... ok",
    "outer middle inner should run deep ... ok",
    "last should run final ... ok",
]

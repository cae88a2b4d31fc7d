from flask import has_app_context


def run_with_app_context(func, *args, **kwargs):
    """Run a job body inside a Flask app context.

    Inline execution already has one; RQ workers started without
    ``scripts/run_rq_worker.py`` do not, so build the app for them.
    """
    if has_app_context():
        return func(*args, **kwargs)
    from hiregate import create_app
    app = create_app()
    with app.app_context():
        return func(*args, **kwargs)

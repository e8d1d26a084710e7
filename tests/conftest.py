"""Shared HTML builders for listing-page tests."""

import html as html_lib


def make_card(
    job_url="https://example.com/jobs/1",
    title="Backend Engineer",
    company="Acme",
    company_site="https://acme.example",
    posted="Posted today",
    location="Remote",
    experience="3+ years",
    apply_url="https://acme.example/apply/1",
    logo="https://cdn.example/acme.png",
    company_size="11-50 employees",
    funding_tags=("Seed",),
    industries=("AI", "Developer Tools"),
    what_they_do="Build tools for builders.",
    include_job_link=True,
):
    """Render one listing card in the topstartups markup."""
    esc = html_lib.escape
    job_link = ""
    if include_job_link:
        job_link = (
            f'<a id="startup-website-link" href="{esc(job_url)}">'
            f'<span id="job-title">{esc(title)}</span></a>'
        )
    apply = f'<a id="apply-button" href="{esc(apply_url)}">Apply</a>' if apply_url else ""
    funding = "".join(f'<span id="funding-tags">{esc(t)}</span>' for t in funding_tags)
    industry = "".join(f'<span id="industry-tags">{esc(t)}</span>' for t in industries)
    posted_html = f'<p><i class="fas fa-clock"></i> {esc(posted)}</p>' if posted is not None else ""
    return f"""
    <div class="infinite-item">
      <div class="card card-body" id="item-card-filter">
        <img src="{esc(logo)}">
        <a id="startup-website-link" href="{esc(company_site)}"><h7>{esc(company)}</h7></a>
        {job_link}
        <p><i class="fas fa-map-marker-alt"></i> {esc(location)}</p>
        <p><i class="fas fa-briefcase"></i> {esc(experience)}</p>
        {posted_html}
        <p><b id="card-header">What they do:</b>
           {esc(what_they_do)}</p>
        <span id="company-size-tags">{esc(company_size)}</span>
        {funding}
        {industry}
        {apply}
      </div>
    </div>
    """


def make_page(cards):
    """Wrap rendered cards in the listing container."""
    return (
        "<html><body><div class='infinite-container'>"
        + "".join(cards)
        + "</div></body></html>"
    )

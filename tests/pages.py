"""HTML pages used as fixtures."""

MATCHES_V1 = """
<html><body><main>
<section class="MatchSection">
  <h2 class="SectionHeader_title">Brasileirão Série A</h2>
  <h3 class="title-7-medium subtitle">Rodada 12</h3>
  <ul class="MatchCardsList_matches">
    <li class="MatchCard">
      <span class="TeamName">Flamengo</span>
      <span class="score">2</span>
      <span class="TeamName">Palmeiras</span>
      <span class="score">1</span>
      <span class="status">Fim de jogo</span>
    </li>
    <li class="MatchCard">
      <span class="TeamName">Santos</span>
      <span class="TeamName">Grêmio</span>
      <time>16:00</time>
    </li>
  </ul>
</section>
<section class="MatchSection">
  <h2 class="SectionHeader_title">Premier League</h2>
  <ul class="MatchCardsList_matches">
    <li class="MatchCard">
      <span class="TeamName">Arsenal</span>
      <span class="TeamName">Chelsea</span>
      <time>18:30</time>
    </li>
  </ul>
</section>
</main></body></html>
"""

# Same page after a redeploy renamed the list and card classes.
MATCHES_V2 = MATCHES_V1.replace("MatchCardsList_matches", "FixtureList").replace(
    'class="MatchCard"', 'class="MatchCardV2"'
)

# Nothing in the catalog matches these cards; only their class, rendered
# size and text identify them.
MATCHES_UNLABELLED = """
<html><body><main>
<section>
  <h2 class="title-6-bold">Copa do Brasil</h2>
  <div class="gameRow" data-rendered-width="600" data-rendered-height="90">
    <div><span>Corinthians</span></div>
    <div><span>Vasco</span></div>
    <div>21:30</div>
  </div>
  <div class="gameRow" data-rendered-width="600" data-rendered-height="20">Bahia x Ceará 19:00</div>
</section>
</main></body></html>
"""

EMPTY_PAGE = "<html><body></body></html>"
